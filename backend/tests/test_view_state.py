from services.view_state import LOAD_ERROR_NOTICE, LoadFailed, LoadStarted, LoadSucceeded, ReportView, apply


def test_load_cycle() -> None:
    view = apply(ReportView(), LoadStarted("2025-03"))
    assert (view.period, view.generation, view.loading) == ("2025-03", 1, True)
    view = apply(view, LoadSucceeded(1, {"rent_collected": 200000}))
    assert view.data == {"rent_collected": 200000}
    assert not view.loading


def test_stale_response_is_discarded() -> None:
    view = apply(ReportView(), LoadStarted("2025-02"))
    view = apply(view, LoadStarted("2025-03"))
    # The February request resolves last.
    view = apply(view, LoadSucceeded(2, "march"))
    view = apply(view, LoadSucceeded(1, "february"))
    assert view.period == "2025-03"
    assert view.data == "march"


def test_failure_keeps_previous_data_and_sets_notice() -> None:
    view = apply(apply(ReportView(), LoadStarted("2025-03")), LoadSucceeded(1, "march"))
    view = apply(view, LoadStarted("2025-04"))
    view = apply(view, LoadFailed(2, "timeout"))
    assert view.data == "march"
    assert view.notice == LOAD_ERROR_NOTICE
    assert not view.loading
    assert apply(view, LoadStarted("2025-05")).notice is None


def test_stale_failure_is_ignored() -> None:
    view = apply(apply(ReportView(), LoadStarted("a")), LoadStarted("b"))
    assert apply(view, LoadFailed(1)) is view
