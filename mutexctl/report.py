"""Turn outcomes into printable lines and exit codes."""

from .autorenew import AutoRenewResult, StopReason
from .exceptions import DecodeError, MutexError
from .models import Outcome

OUTPUT_JSON = "json"
OUTPUT_TOKEN = "token"
OUTPUT_FORMATS = (OUTPUT_JSON, OUTPUT_TOKEN)

EXIT_OK = 0
EXIT_FAILURE = 1


def describe(outcome: Outcome) -> str:
    """One line for an outcome: the raw body on success, the error otherwise."""
    try:
        outcome.raise_for_outcome()
    except MutexError as e:
        return str(e)
    return outcome.body


def render_lock(outcome: Outcome, output: str = OUTPUT_JSON) -> str:
    """Render a successful lock.

    ``json`` passes the body through. ``token`` prints only the token and
    raises DecodeError when the body has none.
    """
    outcome.raise_for_outcome()
    if output != OUTPUT_TOKEN:
        return outcome.body

    if outcome.answer is None:
        raise DecodeError("Could not lock mutex!")
    return outcome.answer.token


def exit_code(outcome: Outcome) -> int:
    return EXIT_OK if outcome.ok else EXIT_FAILURE


def describe_auto_renew(result: AutoRenewResult) -> str:
    if result.reason is StopReason.RENEWAL_FAILED:
        return f"Could not refresh anymore: {describe(result.outcome)}"
    return describe(result.outcome)


def auto_renew_exit_code(result: AutoRenewResult) -> int:
    return EXIT_OK if result.ok else EXIT_FAILURE
