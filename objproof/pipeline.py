"""Rewrite orchestrator — picks the short-text or chunked path and records lineage."""

import logging

from objproof.collaborators import Collaborators
from objproof.config import get_config
from objproof.errors import BrokenLineageError, CollaboratorError, RewriteError, call_collaborator
from objproof.graph import PacingPolicy, run_chunk_pipeline
from objproof.length import count_words, resolve_target_window
from objproof.models import Iteration, ProcessingStats, RewriteRequest, RewriteResult
from objproof.progress import ProgressObserver, ProgressReporter
from objproof.store import IterationStore
from objproof.utils.validator import validate_request

logger = logging.getLogger(__name__)


class RecursiveRewriter:
    """Runs rewrite requests and keeps every attempt in its IterationStore.

    Each call is one operation with a single failure boundary: whatever
    goes wrong, the iteration ends ``failed`` with empty output and the
    result carries the error message and kind.
    """

    def __init__(
        self,
        store: IterationStore | None = None,
        collaborators: Collaborators | None = None,
        pacing: PacingPolicy | None = None,
    ):
        self.store = store if store is not None else IterationStore()
        self.collaborators = collaborators or Collaborators()
        self.pacing = pacing or PacingPolicy.from_config()

    def perform_recursive_rewrite(
        self,
        request: RewriteRequest,
        on_progress: ProgressObserver | None = None,
    ) -> RewriteResult:
        reporter = ProgressReporter(on_progress)
        # Non-string text is rejected by validation below, after registration.
        iteration = self.store.create(
            request.text if isinstance(request.text, str) else "",
            parent_id=request.parent_iteration_id,
            target_word_count=request.target_word_count,
            custom_instructions=request.custom_instructions,
        )

        try:
            validate_request(request)
            if request.parent_iteration_id and request.parent_iteration_id not in self.store:
                raise BrokenLineageError(
                    f"Parent iteration {request.parent_iteration_id} is not registered."
                )

            input_words = count_words(request.text)
            reporter.notify("initializing", "Starting recursive objection-proof rewrite...", 0)
            return self._rewrite(request, iteration, input_words, reporter)
        except Exception as exc:
            error = exc if isinstance(exc, RewriteError) else CollaboratorError(str(exc))
            logger.error("Rewrite %s failed: %s", iteration.id, exc, exc_info=exc)
            iteration.fail()
            return RewriteResult(
                success=False,
                iteration=iteration,
                error=error.message or "Processing failed",
                error_kind=error.kind.value,
            )

    def _rewrite(
        self,
        request: RewriteRequest,
        iteration: Iteration,
        input_words: int,
        reporter: ProgressReporter,
    ) -> RewriteResult:
        config = get_config()
        collaborators = self.collaborators

        target_min, target_max = call_collaborator(
            "Length directive parsing",
            resolve_target_window,
            request.target_word_count,
            request.custom_instructions,
            parse=collaborators.parse_target_length,
        )
        length_config = call_collaborator(
            "Length configuration",
            collaborators.calculate_length_config,
            input_words,
            target_min,
            target_max,
            request.custom_instructions,
        )
        logger.info(
            "Processing %d words, target: %d words, mode: %s",
            input_words,
            length_config.target_mid,
            length_config.length_mode,
        )

        if input_words < config.get("short_text_threshold", 1500):
            reporter.notify("processing", "Processing short text directly...", 30)
            output = call_collaborator(
                "Short-text rewrite",
                collaborators.rewrite_short_text,
                request.text,
                length_config.target_mid,
                request.custom_instructions,
            )
            iteration.complete(output)
            return RewriteResult(
                success=True,
                iteration=iteration,
                processing_stats=ProcessingStats(
                    input_words=input_words,
                    output_words=iteration.word_count,
                    chunks_processed=1,
                    coherence_score="short-text",
                ),
            )

        final_state = run_chunk_pipeline(
            request.text,
            request.custom_instructions,
            length_config,
            collaborators=collaborators,
            reporter=reporter,
            pacing=self.pacing,
            iteration=iteration,
        )

        reporter.notify("finalizing", "Finalizing output...", 95)
        contradictions = final_state["contradictions"]
        iteration.complete(final_state["final_output"])
        logger.info(
            "Rewrite %s completed: %d chunks, %d contradictions",
            iteration.id,
            len(final_state["chunks"]),
            len(contradictions),
        )
        return RewriteResult(
            success=True,
            iteration=iteration,
            processing_stats=ProcessingStats(
                input_words=input_words,
                output_words=iteration.word_count,
                chunks_processed=len(final_state["chunks"]),
                coherence_score="pass" if not contradictions else "needs_review",
                contradictions=contradictions,
            ),
        )

    def get_iteration(self, iteration_id: str) -> Iteration | None:
        return self.store.get(iteration_id)

    def get_iteration_history(self, iteration_id: str) -> list[Iteration]:
        """Return the lineage ending at ``iteration_id``, root first."""
        return self.store.history(iteration_id)

    def clear_iteration_store(self) -> None:
        self.store.clear()
