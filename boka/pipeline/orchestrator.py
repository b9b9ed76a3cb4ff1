"""Pipeline orchestration for one translation job.

Responsibilities:
- Drive the three-round call sequence per segment, strictly in order.
- Mutate job/segment state and notify observers after every transition.
- Assemble and emit document snapshots as spans resolve.
- Honor the cooperative cancellation flag before every network round.

Key types:
- `TranslationArgs`: everything one job needs.
- `TranslationPipeline`: orchestration facade.
- `run_translation`: convenience coroutine wrapping `TranslationPipeline`.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from ..config import ApiConfig, ProviderConfig
from ..errors import ApiError, ParseError, TranslationCancelledError
from ..llm.provider import TranslationProvider
from ..models.datatypes import (
    InteractiveDoc,
    PlannedBlock,
    SegmentStage,
    SwappableSegment,
    TranslationJob,
    TranslationResult,
    TranslationSegment,
    Usage,
)
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from ..telemetry.usage_tracker import UsageTracker
from ..text.segmenter import split_into_segments
from .assembler import build_doc_from_blocks

JobObserver = Callable[[TranslationJob], Awaitable[None] | None]
DocObserver = Callable[[InteractiveDoc], Awaitable[None] | None]

_RoundResult = TypeVar("_RoundResult")


@dataclass(slots=True)
class TranslationArgs:
    """Inputs for one translation job.

    Attributes:
        story_text: Raw source story.
        job_id: Host-assigned job identifier.
        target_language: Target language code or name.
        source_language: Optional source language code.
        adult_mode: Whether vulgar registers are allowed.
        dense_spans: Whether planning aims for more spans per segment.
        provider: Provider preset and overrides.
        cancelled: Cooperative cancellation flag shared with the host.
        on_job: Observer receiving job snapshots (sync or async callable).
        on_doc: Observer receiving document snapshots (sync or async callable).
        provider_client: Optional pre-built provider; built from `provider` when omitted.
    """

    story_text: str
    job_id: str
    target_language: str = "fr"
    source_language: str | None = None
    adult_mode: bool = False
    dense_spans: bool = False
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    cancelled: threading.Event = field(default_factory=threading.Event)
    on_job: JobObserver | None = None
    on_doc: DocObserver | None = None
    provider_client: TranslationProvider | None = None

    def api_config(self) -> ApiConfig:
        return ApiConfig(
            provider=self.provider,
            target_language=self.target_language,
            source_language=self.source_language,
            adult_mode=self.adult_mode,
            dense_spans=self.dense_spans,
        )


def create_job(job_id: str, segment_texts: list[str]) -> TranslationJob:
    """Create a job with one pending segment per source sentence."""

    return TranslationJob(
        id=job_id,
        segments=[
            TranslationSegment(id=f"seg-{index}", source=text)
            for index, text in enumerate(segment_texts, start=1)
        ],
        ready=False,
    )


class TranslationPipeline:
    """Coordinate the translate → plan → variants rounds for a single job."""

    def __init__(self, args: TranslationArgs, run_logger: RunLogger | None = None) -> None:
        self._args = args
        self._run_logger = run_logger
        self._usage = UsageTracker()
        self._blocks: list[PlannedBlock] = []
        self._job: TranslationJob | None = None

    @property
    def usage(self) -> UsageTracker:
        return self._usage

    async def run(self) -> TranslationResult:
        """Run the job to completion, raising the first `ApiError` encountered."""

        args = self._args
        segment_texts = split_into_segments(args.story_text)
        if not segment_texts:
            raise ParseError("No segments")

        job = create_job(args.job_id, segment_texts)
        self._job = job
        await self._emit_job()
        self._log(
            "start",
            "job",
            job=job.id,
            segments=len(job.segments),
            **args.provider.as_diagnostic_metadata(),
        )

        client = args.provider_client
        if client is None:
            client = ProviderFactory.create_provider(args.api_config())

        for index in range(len(job.segments)):
            await self._process_segment(client, job.segments[index])

        doc = build_doc_from_blocks(self._blocks)
        job.ready = True
        await self._emit_job()
        self._log(
            "complete", "job", job=job.id, segments=len(job.segments), **self._usage.summary()
        )
        return TranslationResult(job=job.snapshot(), doc=doc, usage=self._usage.total)

    async def _process_segment(
        self,
        client: TranslationProvider,
        segment: TranslationSegment,
    ) -> None:
        self._check_cancelled()
        self._log("start", "segment", job=self._args.job_id, segment=segment.id)

        try:
            base_text = await self._call_round(
                "translate_base",
                client.translate_base_segment,
                self._args.story_text,
                segment.source,
                segment=segment.id,
            )
        except ApiError:
            segment.advance_base(SegmentStage.ERROR)
            segment.advance_span(SegmentStage.ERROR)
            await self._emit_job()
            raise

        segment.base_text = base_text
        segment.advance_base(SegmentStage.READY)
        await self._emit_job()

        try:
            block = await self._call_round(
                "plan_spans",
                client.plan_block_from_base,
                base_text,
                segment=segment.id,
            )
        except ApiError:
            segment.advance_span(SegmentStage.ERROR)
            await self._emit_job()
            raise

        anchors = [
            (position, item.span.anchor_text)
            for position, item in enumerate(block.segments)
            if isinstance(item, SwappableSegment) and item.span.anchor_text.strip()
        ]

        variant_count = 0
        for position, anchor in anchors:
            self._check_cancelled()
            try:
                variants = await self._call_round(
                    "span_variants",
                    client.generate_span_variants,
                    base_text,
                    anchor,
                    segment=segment.id,
                    span=position,
                )
            except ApiError:
                segment.advance_span(SegmentStage.ERROR)
                await self._emit_job()
                raise

            swappable = block.segments[position]
            if isinstance(swappable, SwappableSegment):
                swappable.span.variants = list(variants)
            variant_count += len(variants)
            segment.variant_count = variant_count
            await self._emit_job()
            await self._emit_doc(build_doc_from_blocks([*self._blocks, block.copy()]))

        segment.advance_span(SegmentStage.READY)
        segment.variant_count = variant_count
        await self._emit_job()
        self._blocks.append(block)
        await self._emit_doc(build_doc_from_blocks(self._blocks))
        self._log(
            "complete", "segment", job=self._args.job_id, segment=segment.id, variants=variant_count
        )

    async def _call_round(
        self,
        stage: str,
        action: Callable[..., tuple[_RoundResult, Usage]],
        *action_args: Any,
        **context: object,
    ) -> _RoundResult:
        """Run one provider round off the event loop with start/complete/failure logs."""

        job_id = self._args.job_id
        self._log("start", stage, job=job_id, **context)
        try:
            result, usage = await asyncio.to_thread(action, *action_args)
        except ApiError as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(
                    stage, type(exc).__name__, job=job_id, **context
                )
            raise
        self._usage.add(stage, usage)
        if self._run_logger is not None:
            self._run_logger.log_usage(
                stage, usage.input_tokens, usage.output_tokens, job=job_id, **context
            )
        self._log("complete", stage, job=job_id, **context)
        return result

    def _check_cancelled(self) -> None:
        if self._args.cancelled.is_set():
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(
                    "job", TranslationCancelledError.__name__, job=self._args.job_id
                )
            raise TranslationCancelledError(self._args.job_id)

    async def _emit_job(self) -> None:
        if self._job is None or self._args.on_job is None:
            return
        await _notify(self._args.on_job, self._job.snapshot())

    async def _emit_doc(self, doc: InteractiveDoc) -> None:
        if self._args.on_doc is None:
            return
        await _notify(self._args.on_doc, doc)

    def _log(self, event: str, stage: str, **context: object) -> None:
        if self._run_logger is None:
            return
        if event == "start":
            self._run_logger.log_stage_start(stage, **context)
        else:
            self._run_logger.log_stage_complete(stage, **context)


async def _notify(observer: Callable[[Any], Any], payload: Any) -> None:
    """Invoke an observer, awaiting it when it returns an awaitable."""

    result = observer(payload)
    if inspect.isawaitable(result):
        await result


async def run_translation(
    args: TranslationArgs,
    run_logger: RunLogger | None = None,
) -> TranslationResult:
    """Run one translation job; see `TranslationPipeline.run`."""

    return await TranslationPipeline(args, run_logger=run_logger).run()
