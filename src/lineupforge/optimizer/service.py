"""Diversity-aware multi-lineup generation on top of the slot filler."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import multiprocessing as mp
import random
import time
from collections import Counter
from concurrent.futures import Future, ProcessPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from lineupforge.config import GeneratorSettings, RosterTemplate, load_settings
from lineupforge.models import PlayerRecord

from .filler import AttemptOutcome, FailureReason, LineupResult, WindowPolicy, build_single_lineup
from .ranking import rank_lineups


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)

STOP_COMPLETED = "completed"
STOP_NO_FEASIBLE = "no_feasible_lineup"
STOP_DIVERSITY = "diversity_exhausted"
STOP_TIME_LIMIT = "time_limit"

_FAILURE_MESSAGES = {
    FailureReason.CATEGORY_STARVATION: "no eligible players left for slot {slot}",
    FailureReason.BUDGET_EXHAUSTED: "no player fits the remaining salary for slot {slot}",
    FailureReason.CONSTRAINT_UNSATISFIABLE: "team, stack or exclusion rules could not be met",
}


class EmptyPoolError(ValueError):
    """Raised when generation is requested without any candidates."""


@dataclass
class BuildOutput:
    lineups: List[LineupResult]
    requested: int
    message: Optional[str] = None
    stop_reason: str = STOP_COMPLETED
    attempts: int = 0
    rejected: int = 0
    failures: Dict[str, int] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.lineups)


@dataclass(frozen=True)
class DrawParams:
    salary_cap: Optional[int]
    max_from_one_team: Optional[int]
    tries: int
    window: WindowPolicy


def lineup_diff(first: LineupResult, second: LineupResult) -> int:
    """Number of players that appear in exactly one of the two lineups."""

    shared = len(first.signature & second.signature)
    return len(first.signature) + len(second.signature) - 2 * shared


def _unique_pool(records: Iterable[PlayerRecord]) -> Tuple[PlayerRecord, ...]:
    seen: set[str] = set()
    unique: List[PlayerRecord] = []
    for record in records:
        if record.player_id in seen:
            logger.warning("Duplicate player id %s in pool; keeping the first entry", record.player_id)
            continue
        seen.add(record.player_id)
        unique.append(record)
    return tuple(unique)


def _draw(
    records: Sequence[PlayerRecord],
    template: RosterTemplate,
    params: DrawParams,
    *,
    noise: float,
    temperature: float,
    rng: random.Random,
) -> Tuple[AttemptOutcome, Counter]:
    """Run filler attempts until one succeeds or ``params.tries`` are spent."""

    failures: Counter = Counter()
    outcome = AttemptOutcome()
    for _ in range(params.tries):
        outcome = build_single_lineup(
            records,
            template,
            salary_cap=params.salary_cap,
            noise=noise,
            temperature=temperature,
            max_from_one_team=params.max_from_one_team,
            window=params.window,
            rng=rng,
        )
        if outcome.ok:
            break
        failures[outcome.reason.value] += 1
        if noise <= 0 and temperature <= 0:
            # Without randomness every retry repeats this exact failure.
            break
    return outcome, failures


_WORKER_STATE: Dict[str, object] = {}


def _init_worker(records: Tuple[PlayerRecord, ...], template: RosterTemplate, params: DrawParams) -> None:
    _WORKER_STATE["records"] = records
    _WORKER_STATE["template"] = template
    _WORKER_STATE["params"] = params


def _run_draw_job(seed: int, noise: float, temperature: float) -> Tuple[AttemptOutcome, Counter]:
    return _draw(
        _WORKER_STATE["records"],  # type: ignore[arg-type]
        _WORKER_STATE["template"],  # type: ignore[arg-type]
        _WORKER_STATE["params"],  # type: ignore[arg-type]
        noise=noise,
        temperature=temperature,
        rng=random.Random(seed),
    )


def _failure_message(outcome: AttemptOutcome, tries: int) -> str:
    template = _FAILURE_MESSAGES.get(outcome.reason, "attempt failed")
    detail = template.format(slot=outcome.slot or "-")
    return f"No feasible lineup after {tries} attempt(s): {detail}"


def _number(lineups: Sequence[LineupResult]) -> List[LineupResult]:
    return [replace(lineup, lineup_id=f"L{idx + 1:03}") for idx, lineup in enumerate(rank_lineups(lineups))]


def _build_single_best(
    records: Tuple[PlayerRecord, ...],
    template: RosterTemplate,
    params: DrawParams,
    *,
    noise: float,
    temperature: float,
    rng: random.Random,
    max_attempts: Optional[int] = None,
    deadline: Optional[float] = None,
) -> BuildOutput:
    """Keep the best of up to ``params.tries`` attempts.

    ``max_attempts`` lowers that bound and ``deadline`` (a ``perf_counter``
    value) ends the search early with whatever was found.
    """
    deterministic = noise <= 0 and temperature <= 0
    budget = 1 if deterministic else params.tries
    if max_attempts is not None:
        budget = max(1, min(budget, max_attempts))
    attempts = 0
    timed_out = False
    failures: Counter = Counter()
    successes: Dict[frozenset, LineupResult] = {}
    last_failure = AttemptOutcome()
    while attempts < budget:
        if deadline is not None and time.perf_counter() >= deadline:
            timed_out = True
            break
        attempts += 1
        outcome = build_single_lineup(
            records,
            template,
            salary_cap=params.salary_cap,
            noise=noise,
            temperature=temperature,
            max_from_one_team=params.max_from_one_team,
            window=params.window,
            rng=rng,
        )
        if outcome.ok:
            successes.setdefault(outcome.lineup.signature, outcome.lineup)
        else:
            failures[outcome.reason.value] += 1
            last_failure = outcome

    if not successes:
        if timed_out:
            message = f"Time limit reached after {attempts} attempt(s) without a lineup"
            stop_reason = STOP_TIME_LIMIT
        else:
            message = _failure_message(last_failure, attempts)
            stop_reason = STOP_NO_FEASIBLE
        logger.warning("Lineup generation produced nothing: %s", message)
        return BuildOutput(
            lineups=[],
            requested=1,
            message=message,
            stop_reason=stop_reason,
            attempts=attempts,
            failures=dict(failures),
        )

    best = _number(list(successes.values()))[:1]
    logger.info(
        "Built best lineup from %s distinct candidate(s) – projection %.2f, salary %s",
        len(successes),
        best[0].projection,
        best[0].salary,
    )
    return BuildOutput(lineups=best, requested=1, attempts=attempts, failures=dict(failures))


def generate_lineups(
    records: Sequence[PlayerRecord],
    template: RosterTemplate,
    *,
    n_lineups: int = 1,
    noise: float = 0.0,
    temperature: float = 0.0,
    min_diff: int = 2,
    max_from_one_team: Optional[int] = None,
    tries_per_lineup: Optional[int] = None,
    salary_cap: Optional[int] = None,
    seed: Optional[int] = None,
    max_attempts: Optional[int] = None,
    time_limit: Optional[float] = None,
    parallel_jobs: int = 1,
    window: Optional[WindowPolicy] = None,
    settings: Optional[GeneratorSettings] = None,
) -> BuildOutput:
    """Generate up to ``n_lineups`` valid, pairwise-distinct lineups.

    A request for one lineup returns the best of several attempts. Larger
    requests keep drawing lineups and accept only those at least ``min_diff``
    players away from everything accepted so far; every rejection nudges
    ``noise`` and ``temperature`` up so later draws explore further. The run
    stops at ``n_lineups`` accepted, at ``max_attempts`` draws or after
    ``time_limit`` seconds, returning what it has with an explanatory message.
    """

    pool = _unique_pool(records)
    if not pool:
        raise EmptyPoolError("Player pool is empty")

    settings = settings or load_settings()
    params = DrawParams(
        salary_cap=salary_cap,
        max_from_one_team=max_from_one_team,
        tries=max(1, tries_per_lineup or settings.tries_per_lineup),
        window=window or WindowPolicy.from_settings(settings),
    )
    noise = max(0.0, noise)
    temperature = max(0.0, temperature)
    rng = random.Random(seed)

    if n_lineups <= 1:
        return _build_single_best(
            pool,
            template,
            params,
            noise=noise,
            temperature=temperature,
            rng=rng,
            max_attempts=max_attempts,
            deadline=time.perf_counter() + time_limit if time_limit else None,
        )

    ceiling = max_attempts if max_attempts is not None else settings.attempt_ceiling_factor * n_lineups
    ceiling = max(1, ceiling)
    deadline = time.perf_counter() + time_limit if time_limit else None
    workers = max(1, parallel_jobs)
    run_start = time.perf_counter()

    logger.info(
        "Starting lineup generation – requested=%s, template=%s, pool=%s, noise=%.3f, temperature=%.3f, min_diff=%s, ceiling=%s, workers=%s",
        n_lineups,
        template.key,
        len(pool),
        noise,
        temperature,
        min_diff,
        ceiling,
        workers,
    )

    accepted: List[LineupResult] = []
    seen: set[frozenset] = set()
    failures: Counter = Counter()
    draws = 0
    rejected = 0
    stop_reason = STOP_DIVERSITY
    message: Optional[str] = None

    def consider(outcome: AttemptOutcome, draw_failures: Counter) -> bool:
        """Apply one draw; return False when generation must stop."""
        nonlocal rejected, noise, temperature, stop_reason, message
        failures.update(draw_failures)
        if not outcome.ok:
            stop_reason = STOP_NO_FEASIBLE
            message = _failure_message(outcome, params.tries)
            return False
        lineup = outcome.lineup
        if lineup.signature in seen or any(lineup_diff(lineup, other) < min_diff for other in accepted):
            rejected += 1
            noise *= settings.growth_factor
            temperature *= settings.growth_factor
            return True
        accepted.append(lineup)
        seen.add(lineup.signature)
        logger.info(
            "Accepted lineup %s/%s – projection %.2f, salary %s (draw %s, elapsed %.2fs)",
            len(accepted),
            n_lineups,
            lineup.projection,
            lineup.salary,
            draws,
            time.perf_counter() - run_start,
        )
        return True

    def out_of_time() -> bool:
        return deadline is not None and time.perf_counter() >= deadline

    if workers == 1:
        while len(accepted) < n_lineups and draws < ceiling:
            if out_of_time():
                stop_reason = STOP_TIME_LIMIT
                break
            draws += 1
            outcome, draw_failures = _draw(pool, template, params, noise=noise, temperature=temperature, rng=rng)
            if not consider(outcome, draw_failures):
                break
    else:
        ctx = mp.get_context("spawn")
        with ProcessPoolExecutor(
            max_workers=workers,
            mp_context=ctx,
            initializer=_init_worker,
            initargs=(pool, template, params),
        ) as executor:
            keep_going = True
            while keep_going and len(accepted) < n_lineups and draws < ceiling:
                if out_of_time():
                    stop_reason = STOP_TIME_LIMIT
                    break
                batch = min(workers, ceiling - draws)
                futures: List[Future] = [
                    executor.submit(_run_draw_job, rng.getrandbits(63), noise, temperature)
                    for _ in range(batch)
                ]
                for future in futures:
                    outcome, draw_failures = future.result()
                    draws += 1
                    if len(accepted) >= n_lineups:
                        continue
                    if not consider(outcome, draw_failures):
                        keep_going = False
                        break
                if not keep_going:
                    for future in futures:
                        future.cancel()

    lineups = _number(accepted)
    elapsed = time.perf_counter() - run_start
    if len(lineups) >= n_lineups:
        stop_reason = STOP_COMPLETED
        message = None
    elif stop_reason == STOP_TIME_LIMIT:
        message = f"Time limit of {time_limit:.1f}s reached after {len(lineups)} of {n_lineups} lineups"
    elif stop_reason == STOP_DIVERSITY:
        message = (
            f"Only {len(lineups)} of {n_lineups} lineups met min_diff={min_diff} "
            f"within {ceiling} draws"
        )

    if message:
        logger.warning("Lineup generation stopped early: %s", message)
    logger.info(
        "Completed %s/%s lineups in %.2fs (%s draws, %s rejected as too similar)",
        len(lineups),
        n_lineups,
        elapsed,
        draws,
        rejected,
    )
    return BuildOutput(
        lineups=lineups,
        requested=n_lineups,
        message=message,
        stop_reason=stop_reason,
        attempts=draws,
        rejected=rejected,
        failures=dict(failures),
    )
