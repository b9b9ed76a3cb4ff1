"""Host-facing translation job service.

Responsibilities:
- Start translation jobs as independent asyncio tasks.
- Keep a job-id-keyed registry of cancellation flags, removing entries when a
  job's task finishes.
- Route job/document snapshots and terminal errors to a host event sink.
- Run provider connection diagnostics.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable
from typing import Any

from ..config import ApiConfig, ProviderConfig
from ..errors import ApiError
from ..llm.anthropic_client import AnthropicClient
from ..llm.openai_compat import OpenAICompatClient
from ..models.datatypes import InteractiveDoc, TranslationJob, TranslationResult
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from .orchestrator import TranslationArgs, run_translation

JOB_EVENT = "boka:translation:job"
DOC_EVENT = "boka:translation:doc"
ERROR_EVENT = "boka:translation:error"

EventSink = Callable[[str, dict[str, Any]], None]

_DEFAULT_TARGET_LANGUAGE = "fr"


class TranslationService:
    """Registry and launcher for concurrently running translation jobs."""

    def __init__(
        self,
        event_sink: EventSink,
        run_logger: RunLogger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._event_sink = event_sink
        self._run_logger = run_logger
        self._clock = clock
        self._cancel_flags: dict[str, threading.Event] = {}
        self._tasks: dict[str, asyncio.Task[TranslationResult | None]] = {}

    def active_job_ids(self) -> list[str]:
        return sorted(self._cancel_flags)

    def start_translation(
        self,
        story_text: str,
        *,
        target_language: str | None = None,
        source_language: str | None = None,
        adult_mode: bool = False,
        dense_spans: bool = False,
        provider: ProviderConfig | None = None,
    ) -> str:
        """Register a job and schedule it on the running event loop; return its id."""

        job_id = self._next_job_id()
        cancelled = threading.Event()
        self._cancel_flags[job_id] = cancelled

        args = TranslationArgs(
            story_text=story_text,
            job_id=job_id,
            target_language=target_language or _DEFAULT_TARGET_LANGUAGE,
            source_language=source_language,
            adult_mode=adult_mode,
            dense_spans=dense_spans,
            provider=provider if provider is not None else ProviderConfig(),
            cancelled=cancelled,
            on_job=self._job_emitter(),
            on_doc=self._doc_emitter(job_id),
        )
        self._tasks[job_id] = asyncio.get_running_loop().create_task(self._run_job(args))
        return job_id

    def cancel_translation(self, job_id: str) -> None:
        """Set the cancellation flag for a running job; unknown ids are ignored."""

        flag = self._cancel_flags.get(job_id)
        if flag is not None:
            flag.set()

    async def wait_for(self, job_id: str) -> TranslationResult | None:
        """Wait for a started job; returns `None` when the job ended with an error."""

        task = self._tasks.get(job_id)
        if task is None:
            return None
        return await task

    async def _run_job(self, args: TranslationArgs) -> TranslationResult | None:
        try:
            result = await run_translation(args, run_logger=self._run_logger)
        except ApiError as exc:
            self._event_sink(ERROR_EVENT, {"jobId": args.job_id, "message": str(exc)})
            return None
        finally:
            self._cancel_flags.pop(args.job_id, None)
            self._tasks.pop(args.job_id, None)

        self._event_sink(DOC_EVENT, {"jobId": args.job_id, "doc": result.doc.to_payload()})
        return result

    def _job_emitter(self) -> Callable[[TranslationJob], None]:
        def _emit(job: TranslationJob) -> None:
            self._event_sink(JOB_EVENT, job.to_payload())

        return _emit

    def _doc_emitter(self, job_id: str) -> Callable[[InteractiveDoc], None]:
        def _emit(doc: InteractiveDoc) -> None:
            self._event_sink(DOC_EVENT, {"jobId": job_id, "doc": doc.to_payload()})

        return _emit

    def _next_job_id(self) -> str:
        base_id = f"job-{int(self._clock() * 1000)}"
        job_id = base_id
        suffix = 1
        while job_id in self._cancel_flags:
            suffix += 1
            job_id = f"{base_id}-{suffix}"
        return job_id


def describe_provider(
    provider: ProviderConfig,
    clock: Callable[[], float] = time.perf_counter,
) -> str:
    """Test connectivity for a provider and return a multi-line diagnostic.

    Raises:
        ApiError: When the client cannot be built or the test request fails.
    """

    client = ProviderFactory.create_provider(ApiConfig(provider=provider))
    started = clock()
    client.test_connection()
    latency_ms = int((clock() - started) * 1000)

    if isinstance(client, AnthropicClient):
        return "\n".join(
            [
                "provider: anthropic",
                f"endpoint: {client.api_url}",
                f"model: {client.model}",
                "auth: x-api-key (set)",
                f"latencyMs: {latency_ms}",
            ]
        )
    if isinstance(client, OpenAICompatClient):
        auth = "bearer (set)" if client.has_api_key else "none"
        return "\n".join(
            [
                f"provider: {provider.preset.value}",
                f"baseUrl: {client.base_url}",
                f"endpoint: {client.chat_completions_url}",
                f"model: {client.model}",
                f"auth: {auth}",
                f"latencyMs: {latency_ms}",
            ]
        )
    return f"provider: {provider.preset.value}\nlatencyMs: {latency_ms}"
