from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from multiprocessing import Pool
from pathlib import Path
from typing import Iterator, List, Tuple

from .config import ReaderConfig
from .models import Revision
from .scanner import RevisionScanner, ScanOutcome
from .sources import SourceFactory, open_source
from .splits import FileSplit, plan_splits

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SplitResult:
    """Outcome of scanning one split."""

    path: str
    start: int
    length: int
    output_path: str | None
    outcome: str
    page_count: int = 0
    revision_count: int = 0
    written_count: int = 0
    skipped_count: int = 0
    elapsed_seconds: float = 0.0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.outcome == ScanOutcome.EXHAUSTED.value

    def to_dict(self) -> dict[str, object]:
        payload = dict(asdict(self))
        payload["success"] = self.success
        return payload


def output_path_for(split: FileSplit, output_dir: str | Path) -> Path:
    """Return the JSONL path that receives the records of ``split``."""
    return Path(output_dir) / f"{Path(split.path).name}.{split.start:012d}.jsonl"


def wants_revision(revision: Revision, config: ReaderConfig) -> bool:
    """Apply the output-time namespace and metadata-only filters."""
    if config.skip_metadata_only and revision.is_metadata_only:
        return False
    namespace = revision.page.namespace if revision.page is not None else None
    return config.accepts_namespace(namespace)


def process_split(
    split: FileSplit,
    config: ReaderConfig,
    source_factory: SourceFactory = open_source,
) -> SplitResult:
    """Scan one split into its JSONL file and report what happened.

    Exceptions are captured in the result so one failed split does not stop
    the others.
    """
    start_time = time.time()
    output_path = output_path_for(split, config.output_dir)
    result = SplitResult(
        path=split.path,
        start=split.start,
        length=split.length,
        output_path=str(output_path),
        outcome=ScanOutcome.RUNNING.value,
    )
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        scanner = RevisionScanner.open(split, source_factory, config.read_chunk_size)
        with scanner, output_path.open("w", encoding="utf-8") as out_file:
            for _, revision in scanner:
                if wants_revision(revision, config):
                    payload = revision.to_dict(include_text=config.render_text)
                    out_file.write(json.dumps(payload, ensure_ascii=False))
                    out_file.write("\n")
                    result.written_count += 1
                if scanner.revisions_emitted % config.log_every == 0:
                    elapsed = max(time.time() - start_time, 1e-6)
                    LOGGER.info(
                        "split %s@%d | revisions=%s | progress=%.2f | speed=%.1f rev/s",
                        split.path,
                        split.start,
                        f"{scanner.revisions_emitted:,}",
                        scanner.progress,
                        scanner.revisions_emitted / elapsed,
                    )
        result.outcome = scanner.outcome.value
        result.page_count = scanner.pages_started
        result.revision_count = scanner.revisions_emitted
        result.skipped_count = scanner.revisions_skipped
    except Exception as exc:  # noqa: broad-except
        LOGGER.exception("Split %s@%d failed", split.path, split.start)
        result.error = str(exc)
    result.elapsed_seconds = time.time() - start_time
    return result


def _process_split_task(args: Tuple[FileSplit, ReaderConfig]) -> SplitResult:
    split, config = args
    return process_split(split, config)


def process_dump(path: str | Path, config: ReaderConfig) -> List[SplitResult]:
    """Plan splits for ``path`` and scan them, in parallel when ``workers > 1``."""
    splits = plan_splits(path, config.split_size)
    LOGGER.info(
        "Planned %d splits for %s (split_size=%d, workers=%d)",
        len(splits),
        path,
        config.split_size,
        config.workers,
    )
    start_time = time.time()
    tasks = [(split, config) for split in splits]
    if config.workers == 1 or len(tasks) <= 1:
        results = [_process_split_task(task) for task in tasks]
    else:
        with Pool(processes=min(config.workers, len(tasks))) as pool:
            results = pool.map(_process_split_task, tasks)

    failed = [r for r in results if not r.success]
    LOGGER.info(
        "DONE | splits=%d | failed=%d | pages=%s | revisions=%s | time=%.1fs",
        len(results),
        len(failed),
        f"{sum(r.page_count for r in results):,}",
        f"{sum(r.revision_count for r in results):,}",
        time.time() - start_time,
    )
    for r in failed:
        LOGGER.error("  %s@%d: %s", r.path, r.start, r.error or r.outcome)
    return results


def iter_revisions(
    path: str | Path,
    config: ReaderConfig,
    source_factory: SourceFactory = open_source,
) -> Iterator[Tuple[str, Revision]]:
    """Yield every record of a dump by scanning its splits in order."""
    for split in plan_splits(path, config.split_size):
        scanner = RevisionScanner.open(split, source_factory, config.read_chunk_size)
        yield from scanner.records()
