"""Dependency-graph task scheduler for pipeline stages."""

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

StageFunc = Callable[[Dict[str, Any]], Any]


class StageFailed(Exception):
    """A stage raised; wraps the original exception."""

    def __init__(self, stage: str, error: BaseException) -> None:
        super().__init__(f"Stage '{stage}' failed: {error}")
        self.stage = stage
        self.error = error


@dataclass
class _Stage:
    name: str
    func: StageFunc
    depends_on: tuple = field(default_factory=tuple)


class StageGraph:
    """Runs stages as soon as their dependencies have finished.

    Each stage function receives a dict of its dependencies' results keyed by
    stage name. Independent stages run concurrently on a thread pool.

    Example:
        graph = StageGraph()
        graph.add("script", lambda deps: draft())
        graph.add("audio", lambda deps: speak(deps["script"]), depends_on=["script"])
        results = graph.run()
    """

    def __init__(self) -> None:
        self._stages: Dict[str, _Stage] = {}

    def add(self, name: str, func: StageFunc, depends_on: Sequence[str] = ()) -> "StageGraph":
        if name in self._stages:
            raise ValueError(f"Stage '{name}' already registered")
        self._stages[name] = _Stage(name=name, func=func, depends_on=tuple(depends_on))
        return self

    @property
    def names(self) -> List[str]:
        return list(self._stages)

    def order(self) -> List[str]:
        """Topological order of stages (registration order breaks ties).

        Raises:
            ValueError: On unknown dependencies or cycles.
        """
        for stage in self._stages.values():
            for dep in stage.depends_on:
                if dep not in self._stages:
                    raise ValueError(f"Stage '{stage.name}' depends on unknown stage '{dep}'")

        ordered: List[str] = []
        remaining = dict(self._stages)
        while remaining:
            ready = [
                name for name, stage in remaining.items()
                if all(dep in ordered for dep in stage.depends_on)
            ]
            if not ready:
                raise ValueError(f"Dependency cycle among stages: {', '.join(remaining)}")
            for name in ready:
                ordered.append(name)
                del remaining[name]
        return ordered

    def run(
        self,
        max_workers: int = 4,
        on_start: Optional[Callable[[str], None]] = None,
        on_complete: Optional[Callable[[str, Any], None]] = None,
    ) -> Dict[str, Any]:
        """Execute every stage and return results keyed by stage name.

        Raises:
            StageFailed: For the first stage that raised; pending stages are
                cancelled and dependants never start.
        """
        self.order()

        results: Dict[str, Any] = {}
        running: Dict[Future, str] = {}
        pending = dict(self._stages)

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="stage") as executor:

            def submit_ready() -> None:
                for name, stage in list(pending.items()):
                    if all(dep in results for dep in stage.depends_on):
                        del pending[name]
                        deps = {dep: results[dep] for dep in stage.depends_on}
                        if on_start:
                            on_start(name)
                        logger.debug(f"Starting stage {name}")
                        running[executor.submit(stage.func, deps)] = name

            submit_ready()
            while running:
                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in done:
                    name = running.pop(future)
                    error = future.exception()
                    if error is not None:
                        for other in running:
                            other.cancel()
                        raise StageFailed(name, error) from error
                    results[name] = future.result()
                    logger.debug(f"Finished stage {name}")
                    if on_complete:
                        on_complete(name, results[name])
                submit_ready()

        return results
