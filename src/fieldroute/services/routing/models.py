"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Sequence

from ...models.domain import Job, Worker

START_NODE = "__start__"

TravelSource = Literal["provider", "haversine", "default"]


def worker_node(worker_id: str) -> str:
    return f"worker:{worker_id}"


@dataclass(slots=True, frozen=True)
class RouteWeights:
    travel_time: float = 1.0
    time_window: float = 2.0
    urgency: float = 1.5
    workload_balance: float = 0.5
    skill_match: float = 0.3


DEFAULT_WEIGHTS = RouteWeights()


@dataclass(slots=True, frozen=True)
class TravelEstimate:
    duration_minutes: float
    distance_miles: float
    source: TravelSource
    duration_in_traffic_minutes: Optional[float] = None

    @property
    def effective_minutes(self) -> float:
        if self.duration_in_traffic_minutes is not None:
            return self.duration_in_traffic_minutes
        return self.duration_minutes


@dataclass(slots=True)
class TravelMatrix:
    """Pairwise travel estimates keyed by node id (start node, job ids, worker home bases)."""

    nodes: tuple[str, ...]
    cells: List[List[Optional[TravelEstimate]]]
    _index: Dict[str, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._index = {node: position for position, node in enumerate(self.nodes)}

    def get(self, origin: str, destination: str) -> Optional[TravelEstimate]:
        row = self._index.get(origin)
        column = self._index.get(destination)
        if row is None or column is None:
            return None
        return self.cells[row][column]

    def __contains__(self, node: str) -> bool:
        return node in self._index


@dataclass(slots=True)
class Arrival:
    job_id: str
    arrival_minute: float
    arrival_time: str
    travel_minutes: float
    window_penalty: float


@dataclass(slots=True)
class RouteScore:
    total: float
    breakdown: Dict[str, float]
    total_travel_time: float
    total_time_window_penalty: float
    total_urgency_score: float
    arrivals: List[Arrival]
    end_minute: float


@dataclass(slots=True)
class RouteResult:
    route: List[Job]
    total_travel_time: float
    total_time_window_penalty: float
    arrivals: List[Arrival]
    end_minute: float
    score: float
    score_breakdown: Dict[str, float]
    improvement_percent: float
    initial_order: List[str]
    optimized_order: List[str]


@dataclass(slots=True)
class WorkerRoute:
    worker: Optional[Worker]
    jobs: List[Job]
    total_travel_time: float = 0.0
    score: float = 0.0
    arrivals: List[Arrival] = field(default_factory=list)
    end_minute: Optional[float] = None


@dataclass(slots=True)
class DispatchOptions:
    weights: RouteWeights = DEFAULT_WEIGHTS
    max_jobs_per_worker: Optional[int] = None
    balance_workload: bool = True


@dataclass(slots=True)
class AssignmentPlan:
    assignments: Dict[str, WorkerRoute]
    unassigned: List[Job]
    stats: Dict[str, float]

    def assigned_count(self) -> int:
        return sum(len(route.jobs) for route in self.assignments.values())


@dataclass(slots=True)
class DepartureOption:
    departure_minute: int
    departure_time: str
    total_travel_time: float
    total_travel_time_in_traffic: float
    score: float
    end_minute: float
    end_time: str


@dataclass(slots=True)
class DepartureSelection:
    best_minute: int
    best_time: str
    results: List[DepartureOption]


@dataclass(slots=True)
class RouteComparison:
    order_a: List[str]
    order_b: List[str]
    score_a: RouteScore
    score_b: RouteScore
    time_saved_minutes: int
    time_window_improved: bool
    total_score_improvement: float
    percent_improvement: float
    recommendation: Literal["A", "B"]


def job_ids(route: Sequence[Job]) -> List[str]:
    return [job.job_id for job in route]
