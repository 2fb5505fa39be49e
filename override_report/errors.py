from __future__ import annotations


class OverrideReportError(RuntimeError):
    pass


class ProposalError(OverrideReportError):
    """The requested proposal cannot be reported on."""


class BlankProposalIdError(ProposalError):
    def __init__(self) -> None:
        super().__init__("Proposal ID must not be blank")


class ProposalNotFoundError(ProposalError):
    def __init__(self, proposal_id: str) -> None:
        super().__init__(f"Proposal not found: {proposal_id}")
        self.proposal_id = proposal_id


class UnsupportedStrategyError(ProposalError):
    def __init__(self, strategy_name: str) -> None:
        super().__init__(f"Proposal is not using the {strategy_name} strategy")
        self.strategy_name = strategy_name


class InvalidStrategyParamsError(ProposalError):
    pass


class RpcError(OverrideReportError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubgraphError(OverrideReportError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PaginationLimitError(SubgraphError):
    pass
