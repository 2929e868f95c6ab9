"""Rebuild Balances Use Case: replay the movement log into the projection."""

from src.application.dto.mappers import report_to_response
from src.application.dto.responses import RebuildReportResponse
from src.core.entities.inventory import RebuildReport
from src.core.services.stock_ledger import StockLedger


class RebuildBalancesUseCase:
    """Rebuild (apply=True) or reconcile (apply=False) cached balances."""

    def __init__(self, ledger: StockLedger | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from src.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    async def execute(self, apply: bool = True) -> RebuildReport:
        ledger = await self._get_ledger()
        if apply:
            return await ledger.rebuild_balances()
        return await ledger.verify_balances()

    def to_response(self, report: RebuildReport) -> RebuildReportResponse:
        return report_to_response(report)
