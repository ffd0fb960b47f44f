from __future__ import annotations

from dataclasses import dataclass, field

from graphwire import All, ExecutionContext, StaticDiscovery


class _IClock:
    pass


class _IJob:
    pass


class _IScheduler:
    pass


@dataclass
class _Clock(_IClock):
    pass


@dataclass
class _CleanupJob(_IJob):
    clock: _IClock


@dataclass
class _ReportJob(_IJob):
    clock: _IClock
    name: str = "report"


@dataclass
class _Scheduler(_IScheduler):
    clock: _IClock
    jobs: All[_IJob]
    history: list[str] = field(default_factory=list)


def test_dataclass_fields_are_injected() -> None:
    discovery = StaticDiscovery(tagged=[_Clock, _CleanupJob, _ReportJob, _Scheduler])
    context = ExecutionContext.create(discovery=discovery)

    scheduler = context.resolve(_IScheduler)

    assert isinstance(scheduler, _Scheduler)
    assert [type(job) for job in scheduler.jobs] == [_CleanupJob, _ReportJob]
    assert all(job.clock is scheduler.clock for job in scheduler.jobs)
    assert scheduler.history == []
    assert scheduler.jobs[1].name == "report"
