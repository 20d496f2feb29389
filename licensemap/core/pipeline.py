# licensemap/core/pipeline.py

"""
End-to-end processing of one inventory.

1. Split the rows into chunks and classify them, serially or on a thread pool
2. Accumulate each chunk by group path and merge the partials in chunk order
3. Reconcile per-user charges against the grouped items
4. Build the metrics tree, the charge structure and the usage comparison
5. Summarize

Every chunk is classified against the same taxonomy generation. If the
taxonomy is replaced mid-run the whole classification restarts against the
new generation, up to max_generation_retries times.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Iterable, NamedTuple, Optional
import logging
import threading

from licensemap.config import Settings
from licensemap.core.aggregation import GroupAccumulator, accumulate, build_tree, merge_partials
from licensemap.core.charges import build_charge_structure, combine_structures, filter_quarter
from licensemap.core.classification import Classifier, StaleGenerationError
from licensemap.core.costs import CostReconciler
from licensemap.core.summary import log_classification_stats, summarize
from licensemap.models import (
    ChargeGroup,
    ChargeRecord,
    Classification,
    ClassifiedRecord,
    CombinedGroup,
    CostReconciliationReport,
    CostRecord,
    ProcessingSummary,
    TreeNode,
    UNCLASSIFIED,
)

logger = logging.getLogger(__name__)


class ProcessingCancelled(RuntimeError):
    """The caller asked the run to stop before it finished."""


class ChunkOutput(NamedTuple):
    records: list[ClassifiedRecord]
    shard: dict[str, Classification]
    groups: dict[str, GroupAccumulator]


class ProcessingResult:
    """Result of a processing run."""

    def __init__(self):
        self.records: list[ClassifiedRecord] = []
        self.groups: dict[str, GroupAccumulator] = {}
        self.tree: dict[str, TreeNode] = {}
        self.charge_structure: dict[str, ChargeGroup] = {}
        self.combined: dict[str, CombinedGroup] = {}
        self.cost_report: Optional[CostReconciliationReport] = None
        self.summary: Optional[ProcessingSummary] = None
        self.generation: int = 0
        self.duration_ms: int = 0

    @property
    def unclassified(self) -> list[ClassifiedRecord]:
        return [r for r in self.records if r.group_path == UNCLASSIFIED]

    def to_dict(self) -> dict:
        """Convert to plain dictionaries."""
        return {
            "summary": self.summary.model_dump() if self.summary else None,
            "records": [r.to_dict() for r in self.records],
            "tree": {name: node.model_dump() for name, node in self.tree.items()},
            "structure": {name: group.model_dump() for name, group in self.combined.items()},
            "cost_report": self.cost_report.model_dump() if self.cost_report else None,
            "generation": self.generation,
            "duration_ms": self.duration_ms,
        }


def _chunks(rows: list[dict], size: int) -> list[list[dict]]:
    size = max(size, 1)
    return [rows[i:i + size] for i in range(0, len(rows), size)]


def _check_cancelled(cancel_event: Optional[threading.Event], done: int, total: int) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.warning(f"Processing cancelled after {done}/{total} chunks")
        raise ProcessingCancelled(f"Processing cancelled after {done}/{total} chunks")


def classify_chunk(
    classifier: Classifier,
    rows: list[dict],
    generation: int,
    settings: Settings,
) -> ChunkOutput:
    """Classify and accumulate one chunk. Raises StaleGenerationError."""
    names = [row.get(settings.application_field) for row in rows]
    results, shard = classifier.classify_batch(names, generation)
    records = [ClassifiedRecord.from_classification(row, result) for row, result in zip(rows, results)]
    return ChunkOutput(records, shard, accumulate(records, settings))


def _classify_all(
    classifier: Classifier,
    chunks: list[list[dict]],
    generation: int,
    max_workers: int,
    cancel_event: Optional[threading.Event],
) -> list[ChunkOutput]:
    settings = classifier.settings
    outputs: list[Optional[ChunkOutput]] = [None] * len(chunks)

    if max_workers <= 1 or len(chunks) <= 1:
        for idx, chunk in enumerate(chunks):
            _check_cancelled(cancel_event, idx, len(chunks))
            outputs[idx] = classify_chunk(classifier, chunk, generation, settings)
        return outputs

    _check_cancelled(cancel_event, 0, len(chunks))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_chunk = {
            executor.submit(classify_chunk, classifier, chunk, generation, settings): idx
            for idx, chunk in enumerate(chunks)
        }

        completed = 0
        try:
            for future in as_completed(future_to_chunk):
                outputs[future_to_chunk[future]] = future.result()
                completed += 1
                logger.debug(f"Progress: {completed}/{len(chunks)} chunks classified")
                if completed < len(chunks):
                    _check_cancelled(cancel_event, completed, len(chunks))
        except Exception:
            executor.shutdown(wait=False, cancel_futures=True)
            raise

    return outputs


def process(
    records: Iterable[dict],
    classifier: Classifier,
    cost_records: Optional[list[CostRecord]] = None,
    charge_records: Optional[list[ChargeRecord]] = None,
    quarter: Optional[str] = None,
    max_workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ProcessingResult:
    """
    Classify, reconcile and aggregate an inventory.

    Raises ProcessingCancelled when cancel_event is set between chunks, and
    StaleGenerationError when the taxonomy keeps changing beyond the retry limit.
    """
    start_time = datetime.now()
    settings = classifier.settings
    rows = list(records)
    chunks = _chunks(rows, chunk_size or settings.chunk_size)
    max_workers = max_workers or settings.max_workers
    result = ProcessingResult()

    logger.info(f"Processing {len(rows)} records in {len(chunks)} chunks (max_workers={max_workers})")

    # ============================================
    # Classification, retried on taxonomy change
    # ============================================
    attempts = 0
    while True:
        generation = classifier.generation
        try:
            outputs = _classify_all(classifier, chunks, generation, max_workers, cancel_event)
            break
        except StaleGenerationError as exc:
            attempts += 1
            if attempts > settings.max_generation_retries:
                raise
            logger.warning(
                f"Taxonomy changed during classification (generation {exc.expected} -> {exc.current}), "
                f"restarting attempt {attempts + 1}"
            )

    for output in outputs:
        classifier.merge_cache(output.shard, generation)

    result.generation = generation
    result.records = [record for output in outputs for record in output.records]
    result.groups = merge_partials(*(output.groups for output in outputs))

    # ============================================
    # Per-user charges, then the tree
    # ============================================
    if cost_records is not None:
        result.cost_report = CostReconciler(cost_records, settings).apply_to_groups(result.groups)

    result.tree = build_tree(result.groups, settings)

    # ============================================
    # Per-seat charges and usage comparison
    # ============================================
    charges_in_quarter = None
    if charge_records is not None:
        charges_in_quarter = filter_quarter(charge_records, quarter)
        result.charge_structure = build_charge_structure(charges_in_quarter)
    result.combined = combine_structures(result.groups, result.charge_structure)

    result.summary = summarize(result.records, charges_in_quarter, settings)
    log_classification_stats(result.summary.usage.classifications)

    result.duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
    logger.info(f"Processed {len(rows)} records into {len(result.groups)} groups in {result.duration_ms}ms")
    return result
