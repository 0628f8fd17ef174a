"""
ADVISORY ORCHESTRATOR
Turns a computed dose into a complete advisory note.

STEP 1: Knowledge lookup (RxNav, best effort, failures mean "no knowledge")
STEP 2: Prompt building (prompt_builder.py)
STEP 3: Model call (llm_client.py, bounded timeout, one retry on timeout only)
STEP 4: Response parsing (parser.py, never fails on content)
STEP 5: Completeness (fallback.py, whole replacement or per-field backfill)

Each request is independent. The dose result is never modified; a failed
model call raises and returns no advisory at all.
"""
from typing import Optional
import asyncio
import logging

import config
from errors import AdvisoryError, AdvisoryTimeoutError, AdvisoryTransportError
from fallback import ensure_complete
from knowledge import KnowledgeLookup
from llm_client import GenerativeTextClient
from log import log_advisory
from models import AdvisoryRequest, AdvisoryResult, AdvisoryStage, AdvisoryTrace, GenerationResponse, KnowledgeSnippet
from parser import parse_advisory
from prompt_builder import build_prompt

logger = logging.getLogger(__name__)


class AdvisoryOrchestrator:
    def __init__(
        self,
        client: GenerativeTextClient,
        knowledge: Optional[KnowledgeLookup] = None,
        timeout_seconds: float = config.REQUEST_TIMEOUT_SECONDS,
        max_attempts: int = config.MAX_MODEL_ATTEMPTS,
        audit_dir: Optional[str] = None,
    ):
        self.client = client
        self.knowledge = knowledge
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(1, max_attempts)
        self.audit_dir = audit_dir

    async def generate_advisory(self, request: AdvisoryRequest, trace: Optional[AdvisoryTrace] = None) -> AdvisoryResult:
        trace = trace if trace is not None else AdvisoryTrace()
        dose = request.dose

        trace.advance(AdvisoryStage.LOOKING_UP_KNOWLEDGE)
        knowledge = await self._lookup_knowledge(dose.medicine)

        trace.advance(AdvisoryStage.BUILDING_PROMPT)
        prompt = build_prompt(request, knowledge)

        trace.advance(AdvisoryStage.CALLING_MODEL)
        try:
            generation = await self._call_model(prompt)
        except AdvisoryError as e:
            trace.advance(AdvisoryStage.FAILED)
            logger.error("[ADVISORY] Failed for %s: %s", dose.medicine, e)
            raise

        trace.advance(AdvisoryStage.PARSING_RESPONSE)
        parsed = parse_advisory(generation.text, generation.finish_reason)

        trace.advance(AdvisoryStage.ENSURING_COMPLETENESS)
        advisory = ensure_complete(parsed, dose)
        if advisory.source != parsed.source:
            logger.info("[ADVISORY] Model output unusable (%s), using deterministic fallback", parsed.source.value)
        elif advisory.patched:
            logger.info("[ADVISORY] Backfilled %s from fallback", ", ".join(advisory.patched))

        trace.advance(AdvisoryStage.DONE)
        self._audit(dose.medicine, trace, prompt, generation.text, advisory)
        return advisory

    async def _lookup_knowledge(self, medicine_name: str) -> Optional[KnowledgeSnippet]:
        if self.knowledge is None:
            return None
        try:
            return await asyncio.to_thread(self.knowledge.fetch_knowledge, medicine_name)
        except Exception as e:
            logger.warning("[KNOWLEDGE] Lookup failed for %s, continuing without it: %s", medicine_name, e)
            return None

    async def _call_model(self, prompt: str) -> GenerationResponse:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await asyncio.wait_for(
                    asyncio.to_thread(self.client.generate, prompt),
                    timeout=self.timeout_seconds,
                )
            except (asyncio.TimeoutError, AdvisoryTimeoutError) as e:
                logger.warning("[LLM] Attempt %d/%d timed out", attempt, self.max_attempts)
                if attempt == self.max_attempts:
                    raise AdvisoryTimeoutError(f"timed out after {attempt} attempt(s)") from e
            except AdvisoryError:
                raise
            except Exception as e:
                raise AdvisoryTransportError(str(e)) from e

    def _audit(self, medicine, trace, prompt, raw_text, advisory) -> None:
        try:
            log_advisory(medicine, trace.stages, prompt, raw_text, advisory, audit_dir=self.audit_dir)
        except OSError as e:
            logger.warning("[AUDIT] Could not write advisory trace: %s", e)


def create_orchestrator() -> AdvisoryOrchestrator:
    """Create an orchestrator wired to the configured Gemini and RxNav endpoints."""
    return AdvisoryOrchestrator(client=GenerativeTextClient(), knowledge=KnowledgeLookup())
