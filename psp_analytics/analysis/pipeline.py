"""
Analysis pipeline orchestration.

Coordinates the flow: build journeys → aggregate → ratio views →
time buckets → flows → summaries
"""

import asyncio
import os
from pathlib import Path
from typing import Any, Callable, Iterable

from psp_analytics.core.aggregation import (
    CountryAggregator,
    PSPAggregator,
    TimeBucketedAggregator,
    best_psp_by_country,
    extract_cross_psp_flows,
    extract_retried_transactions,
    journey_ratio_view,
    psp_rescue_stats,
    raw_attempt_ratios,
    recalculate_with_exclusions,
    routing_patterns,
    summarize_decline_reasons,
    summarize_retries,
    tally_decline_reasons,
)
from psp_analytics.core.aggregation.ratio_views import DEFAULT_MIN_TRANSACTIONS
from psp_analytics.core.journeys import JourneyBuilder
from psp_analytics.core.models import AnalysisResult, ExclusionTotals, Transaction
from psp_analytics.core.status import StatusClassifier, StatusVocabulary, StatusVocabularyLoader
from psp_analytics.observability.logger import get_logger, log_operation
from psp_analytics.observability.metrics import (
    analysis_pass_duration_seconds,
    set_gauge,
    track_duration,
    weighted_success_rate,
)

logger = get_logger(__name__)

DEFAULT_VOCABULARY_PATH = "config/status_vocabulary.yaml"

AnalysisPass = Callable[[dict[str, Any]], Any]


class AnalysisPipeline:
    """
    Runs every analysis pass over one transaction list.

    Flow:
    1. Build journeys (the only pass that reads transactions)
    2. PSP-level and transaction-level metrics
    3. Journey ratio view and raw attempt ratios
    4. Daily, weekly and monthly buckets
    5. Retries, cross-PSP flows and decline reasons
    6. Summaries over the flows and decline reasons

    Each pass reads the retained journeys and earlier pass outputs only, and
    yields one immutable piece of the AnalysisResult.
    """

    def __init__(
        self,
        classifier: StatusClassifier | None = None,
        vocabulary_path: str | None = None,
        min_transactions: int = DEFAULT_MIN_TRANSACTIONS,
    ):
        """
        Initialize the pipeline.

        Args:
            classifier: Status classifier; loaded from ``vocabulary_path``
                when not given
            vocabulary_path: Status vocabulary YAML file (defaults to env var
                PSP_STATUS_CONFIG, then config/status_vocabulary.yaml)
            min_transactions: Journeys a PSP needs in a country to be
                considered for the best-PSP view
        """
        if classifier is None:
            classifier = StatusClassifier(self._load_vocabulary(vocabulary_path))
        self.classifier = classifier
        self.min_transactions = min_transactions

        self.journey_builder = JourneyBuilder(self.classifier)
        self.psp_aggregator = PSPAggregator()
        self.country_aggregator = CountryAggregator()
        self.time_aggregator = TimeBucketedAggregator()

    @staticmethod
    def _load_vocabulary(vocabulary_path: str | None) -> StatusVocabulary:
        path = vocabulary_path or os.getenv("PSP_STATUS_CONFIG", DEFAULT_VOCABULARY_PATH)
        if Path(path).exists():
            return StatusVocabularyLoader(path).load()
        logger.warning(f"Status vocabulary file not found: {path}, using defaults")
        return StatusVocabulary()

    def run(self, transactions: Iterable[Transaction | dict]) -> AnalysisResult:
        """
        Analyze a transaction list to completion.

        Args:
            transactions: Transaction records, or dicts with Transaction fields

        Returns:
            Immutable analysis result
        """
        transactions = self._coerce(transactions)
        outputs: dict[str, Any] = {}

        with log_operation("Analysis", logger=logger, transactions=len(transactions)):
            for name, analysis_pass in self._passes(transactions):
                self._run_pass(name, analysis_pass, outputs)

        return self._assemble(transactions, outputs)

    async def run_async(self, transactions: Iterable[Transaction | dict]) -> AnalysisResult:
        """
        Same result as ``run``, yielding to the event loop between passes.

        Passes are never interrupted; a caller awaiting the result sees
        either nothing or the complete result.
        """
        transactions = self._coerce(transactions)
        outputs: dict[str, Any] = {}

        with log_operation("Analysis", logger=logger, transactions=len(transactions)):
            for name, analysis_pass in self._passes(transactions):
                self._run_pass(name, analysis_pass, outputs)
                await asyncio.sleep(0)

        return self._assemble(transactions, outputs)

    def recalculate(self, result: AnalysisResult, excluded_psps: Iterable[str]) -> ExclusionTotals:
        """
        Totals for ``result`` as if ``excluded_psps`` never processed anything.

        ``result`` is left untouched and stays valid.
        """
        excluded_psps = list(excluded_psps)
        with log_operation("Exclusion recalculation", logger=logger, excluded_psps=excluded_psps), \
                track_duration(analysis_pass_duration_seconds, pass_name="exclusion"):
            return recalculate_with_exclusions(result, excluded_psps)

    def _passes(self, transactions: list[Transaction]) -> list[tuple[str, AnalysisPass]]:
        # Names match AnalysisResult fields
        return [
            ("journeys", lambda out: self.journey_builder.build(transactions)),
            ("psp_metrics", lambda out: self.psp_aggregator.aggregate(out["journeys"].values())),
            ("transaction_metrics", lambda out: self.country_aggregator.aggregate(out["journeys"].values())),
            ("journey_ratios", lambda out: journey_ratio_view(out["journeys"].values())),
            ("raw_attempt_ratios", lambda out: raw_attempt_ratios(out["journeys"].values())),
            ("time_analysis", lambda out: self.time_aggregator.analyze(out["journeys"].values())),
            ("retried_transactions", lambda out: extract_retried_transactions(out["journeys"].values())),
            ("cross_psp_flows", lambda out: extract_cross_psp_flows(out["journeys"].values())),
            ("decline_reasons", lambda out: tally_decline_reasons(out["journeys"].values(), self.classifier)),
            ("retry_summary", lambda out: summarize_retries(out["retried_transactions"])),
            ("psp_rescue_stats", lambda out: psp_rescue_stats(out["cross_psp_flows"])),
            ("routing_patterns", lambda out: routing_patterns(out["cross_psp_flows"])),
            ("decline_summary", lambda out: summarize_decline_reasons(out["decline_reasons"])),
            ("best_psp_by_country", lambda out: best_psp_by_country(
                out["journey_ratios"], min_transactions=self.min_transactions
            )),
        ]

    @staticmethod
    def _run_pass(name: str, analysis_pass: AnalysisPass, outputs: dict[str, Any]) -> None:
        with log_operation(f"Analysis pass {name}", logger=logger, pass_name=name), \
                track_duration(analysis_pass_duration_seconds, pass_name=name):
            outputs[name] = analysis_pass(outputs)

    @staticmethod
    def _assemble(transactions: list[Transaction], outputs: dict[str, Any]) -> AnalysisResult:
        result = AnalysisResult(total_transactions=len(transactions), **outputs)

        set_gauge(weighted_success_rate, result.psp_metrics.weighted_success_rate, view="psp_level")
        set_gauge(
            weighted_success_rate,
            result.transaction_metrics.weighted_success_rate,
            view="transaction_level",
        )
        logger.info(
            "Analysis complete",
            extra={
                "transactions": result.total_transactions,
                "journeys": result.journey_count,
                "weighted_success_rate": result.transaction_metrics.weighted_success_rate,
            }
        )
        return result

    @staticmethod
    def _coerce(transactions: Iterable[Transaction | dict]) -> list[Transaction]:
        return [
            tx if isinstance(tx, Transaction) else Transaction.model_validate(tx)
            for tx in transactions
        ]
