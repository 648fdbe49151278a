"""
Analyzer - runs the schema checks over a structural schema or a whole CRD.

Two checks exist:
- limits: every list/map/string declares a maximum size
- cost: every validation rule stays under the cost budget once scaled by how
  many times its node can occur

The checks are independent read-only traversals of the same immutable tree,
so they can run on worker threads without coordination.
"""

from __future__ import annotations

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from crdlint.analyzer.cost import check_expression_cost
from crdlint.analyzer.limits import check_max_limits
from crdlint.analyzer.models import (
    AnalysisResult,
    CostReport,
    DocumentResult,
    ExecutionMetadata,
    LimitFinding,
)
from crdlint.exceptions import AnalyzerError

if TYPE_CHECKING:
    from crdlint.compiler.protocol import ExpressionCompiler
    from crdlint.config import Config
    from crdlint.schema.models import CRDDocument, SchemaNode

logger = logging.getLogger(__name__)

CHECK_LIMITS = "limits"
CHECK_COST = "cost"


class Analyzer:
    """
    Structural schema analyzer.

    Example:
        from crdlint import parse_crd, Analyzer

        document = parse_crd("crd.yaml")
        result = Analyzer().analyze_document(document)

        for version in result.results:
            for finding in version.limit_findings:
                print(finding)
    """

    DEFAULT_MAX_WORKERS: int = 2  # One per check

    def __init__(
        self,
        compiler: "ExpressionCompiler | None" = None,
        cost_budget: int | None = None,
        config: "Config | None" = None,
        parallel: bool | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        check_limits: bool | None = None,
        check_cost: bool | None = None,
    ) -> None:
        """
        Initialize the analyzer.

        Args:
            compiler: Expression compiler for the cost check (default: a
                CelCostEstimator built from config)
            cost_budget: Budget for a single rule (default: config.cost_budget)
            config: Configuration instance (if None, uses get_config())
            parallel: Run the checks on worker threads
            max_workers: Thread pool size for parallel execution
            check_limits: Run the size limit check (default: config)
            check_cost: Run the rule cost check (default: config)
        """
        if config is None:
            from crdlint.config import get_config
            config = get_config()
        self.config = config

        self.cost_budget = config.cost_budget if cost_budget is None else cost_budget
        if self.cost_budget < 0:
            raise AnalyzerError(f"Cost budget must be non-negative, got {self.cost_budget}")

        if compiler is None:
            from crdlint.compiler.cel import CelCostEstimator
            compiler = CelCostEstimator.from_config(config)
        self.compiler = compiler
        self.parallel = config.parallel if parallel is None else parallel
        self.max_workers = max_workers
        self.check_limits = config.check_limits if check_limits is None else check_limits
        self.check_cost = config.check_cost if check_cost is None else check_cost

    @property
    def checks(self) -> tuple[str, ...]:
        enabled = []
        if self.check_limits:
            enabled.append(CHECK_LIMITS)
        if self.check_cost:
            enabled.append(CHECK_COST)
        return tuple(enabled)

    def analyze(self, schema: "SchemaNode", version: str | None = None) -> AnalysisResult:
        """
        Run the enabled checks over one schema tree.

        This method is thread-safe: the schema is never mutated.

        Args:
            schema: Root of the structural schema
            version: CRD version name, recorded on the result

        Returns:
            AnalysisResult with findings in depth-first order and metadata
        """
        start_time = time.perf_counter()

        if self.parallel and len(self.checks) > 1:
            limit_findings, cost_report = self._run_parallel(schema)
        else:
            limit_findings = self._run_limits(schema)
            cost_report = self._run_cost(schema)

        duration_ms = (time.perf_counter() - start_time) * 1000

        metadata = ExecutionMetadata(
            node_count=schema.count_nodes(),
            rule_count=schema.count_rules(),
            cost_budget=self.cost_budget,
            checks_run=self.checks,
            analysis_duration_ms=duration_ms,
        )
        result = AnalysisResult(
            version=version,
            limit_findings=tuple(limit_findings),
            cost_findings=cost_report.cost_findings,
            compile_findings=cost_report.compile_findings,
            metadata=metadata,
        )

        logger.debug(
            "Analyzed %s in %.2fms: %s",
            version or "schema",
            duration_ms,
            result.summary(),
        )
        return result

    def analyze_document(
        self,
        document: "CRDDocument",
        version: str | None = None,
    ) -> DocumentResult:
        """
        Analyze every version of a CRD, or only the named one.

        Raises:
            AnalyzerError: If the named version does not exist
        """
        if version is not None:
            selected = document.get_version(version)
            if selected is None:
                available = ", ".join(v.name or "<unnamed>" for v in document.versions)
                raise AnalyzerError(
                    f"Version {version!r} not found (available: {available})"
                )
            versions = [selected]
        else:
            versions = list(document.versions)

        return DocumentResult(
            name=document.name,
            results=[self.analyze(v.root, version=v.name) for v in versions],
        )

    async def analyze_async(self, schema: "SchemaNode", version: str | None = None) -> AnalysisResult:
        """
        Async version of analyze() for use in async applications.

        Runs the analysis in a thread pool to avoid blocking the event loop.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self.analyze(schema, version))

    # ── Checks ────────────────────────────────────────────────────────

    def _run_limits(self, schema: "SchemaNode") -> list[LimitFinding]:
        if not self.check_limits:
            return []
        return check_max_limits(schema)

    def _run_cost(self, schema: "SchemaNode") -> CostReport:
        if not self.check_cost:
            return CostReport()
        return check_expression_cost(schema, self.compiler, self.cost_budget)

    def _run_parallel(self, schema: "SchemaNode") -> tuple[list[LimitFinding], CostReport]:
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            limits_future = executor.submit(self._run_limits, schema)
            cost_future = executor.submit(self._run_cost, schema)
            return limits_future.result(), cost_future.result()
