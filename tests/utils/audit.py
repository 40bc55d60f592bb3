from typing import Iterable, List


def mocked_audit_outcomes(mock_uow) -> List[str]:
    """Outcomes written through a mocked unit of work, in call order"""
    return [
        call.args[0].outcome.value
        for call in mock_uow.audit_entries.create.await_args_list
    ]


def collapse_repeats(outcomes: Iterable[str]) -> List[str]:
    """One compensation step writes one rolled_back entry; compare them as one"""
    collapsed: List[str] = []
    for outcome in outcomes:
        if not collapsed or collapsed[-1] != outcome:
            collapsed.append(outcome)
    return collapsed
