"""Pool errors.

Every failure is scoped to the single requested action. The API layer turns
these into ``{'error': ..., 'code': ...}`` responses using ``status``.
"""


class SquaresError(Exception):
    """Base class for all pool errors"""
    code = 'error'
    status = 400
    message = 'Request failed'

    def __init__(self, message=None):
        super().__init__(message or self.message)


# ============ Validation errors ============

class NotSignedIn(SquaresError):
    code = 'not_signed_in'
    status = 401
    message = 'Not signed in'


class NotAdministrator(SquaresError):
    code = 'not_administrator'
    status = 403
    message = 'Only the administrator may do this'


class InvalidCell(SquaresError):
    code = 'invalid_cell'
    message = 'Row and column must be between 0 and 9'


class GameLocked(SquaresError):
    code = 'game_locked'
    status = 409
    message = 'Game already locked; squares can no longer change'


class CellAlreadyOwned(SquaresError):
    code = 'cell_already_owned'
    status = 409
    message = 'Cell already owned by someone else'


class CellNotOwned(SquaresError):
    code = 'cell_not_owned'
    status = 403
    message = 'Cell not owned by you'


class GridIncomplete(SquaresError):
    code = 'grid_incomplete'
    status = 409

    def __init__(self, filled):
        self.filled = filled
        super().__init__(f"Grid incomplete: {filled}/100 squares filled")


class PayoutSumInvalid(SquaresError):
    code = 'payout_sum_invalid'
    message = 'Payout sum invalid: the four quarters must total 100'


class UnknownQuarter(SquaresError):
    code = 'unknown_quarter'

    def __init__(self, quarter):
        self.quarter = quarter
        super().__init__(f"Unknown quarter {quarter!r}")


class InvalidRequestBody(SquaresError):
    code = 'invalid_request_body'
    message = 'Request body must be a JSON object'


class ConfirmationRequired(SquaresError):
    code = 'confirmation_required'
    message = 'Restart must be confirmed'


# ============ Connectivity errors ============

class StoreUnavailable(SquaresError):
    code = 'store_unavailable'
    status = 503
    message = 'Document store unavailable'
