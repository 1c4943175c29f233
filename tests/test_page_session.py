from unittest.mock import MagicMock

import pytest
from selenium.common.exceptions import WebDriverException

from src import config
from src.alpha_nav.errors import ScrollSourceUnavailable
from src.alpha_nav.host_loop import HostLoop
from src.alpha_nav.page_session import PageSession, SeleniumScrollSource
from src.alpha_nav.scroll_observer import ScrollObserver

from conftest import FakeClock


@pytest.fixture
def driver():
    return MagicMock()


@pytest.fixture
def page(driver, emitter):
    return PageSession(driver, emitter=emitter, header_offset=100)


def test_measure_reads_offset_and_every_anchor_in_one_script(page, driver):
    driver.execute_script.return_value = [300, [0, 512, None]]

    scroll_y, tops = page.measure(["letter-A", "letter-B", "letter-Z"])

    assert (scroll_y, tops) == (300.0, [0.0, 512.0, None])
    assert driver.execute_script.call_count == 1
    script, anchor_ids = driver.execute_script.call_args.args
    assert "getBoundingClientRect" in script
    assert anchor_ids == ["letter-A", "letter-B", "letter-Z"]


def test_measure_with_no_result_defaults_to_top(page, driver):
    driver.execute_script.return_value = None
    assert page.measure([]) == (0.0, [])


def test_scroll_to_anchor_passes_header_offset_and_behaviour(page, driver):
    driver.execute_script.return_value = True
    page.scroll_to_anchor("letter-C", smooth=False)
    _, anchor_id, offset, smooth = driver.execute_script.call_args.args
    assert (anchor_id, offset, smooth) == ("letter-C", 100.0, False)


def test_apply_rail_state_uses_configured_classes(page, driver):
    driver.execute_script.return_value = 3
    page.apply_rail_state("B", pulsing=True)
    args = driver.execute_script.call_args.args
    assert args[1:] == (
        config.PAGE_SELECTORS["rail_item"],
        "B",
        config.PAGE_SELECTORS["rail_active_class"],
        config.PAGE_SELECTORS["rail_pulse_class"],
        True,
    )


def test_drain_rail_clicks(page, driver):
    driver.execute_script.return_value = ["A", "C"]
    assert page.drain_rail_clicks() == ["A", "C"]
    driver.execute_script.return_value = None
    assert page.drain_rail_clicks() == []


def test_open_loads_file_url(page, driver, tmp_path):
    target = tmp_path / "dir.html"
    target.write_text("<html></html>", encoding="utf-8")
    driver.find_element.return_value = MagicMock()
    page.open(target)
    assert driver.get.call_args.args[0] == target.resolve().as_uri()


def test_listener_installed_once_and_removed_with_last(page, driver):
    source = SeleniumScrollSource(page)
    driver.execute_script.return_value = True
    first, second = (lambda y: None), (lambda y: None)

    source.add_listener(first)
    source.add_listener(second)
    assert driver.execute_script.call_count == 1
    assert "addEventListener" in driver.execute_script.call_args.args[0]

    source.remove_listener(first)
    assert driver.execute_script.call_count == 1
    source.remove_listener(second)
    assert "removeEventListener" in driver.execute_script.call_args.args[0]
    assert source.listener_count() == 0


def test_host_without_event_listener_fails_fast(page, driver):
    source = SeleniumScrollSource(page)
    driver.execute_script.return_value = False
    with pytest.raises(ScrollSourceUnavailable):
        source.add_listener(lambda y: None)
    assert source.listener_count() == 0


def test_driver_error_on_setup_fails_fast(page, driver):
    source = SeleniumScrollSource(page)
    driver.execute_script.side_effect = WebDriverException("no window")
    with pytest.raises(ScrollSourceUnavailable, match="no window"):
        source.add_listener(lambda y: None)


def test_poll_dispatches_once_per_batch(page, driver):
    source = SeleniumScrollSource(page)
    driver.execute_script.return_value = True
    seen = []
    source.add_listener(seen.append)

    driver.execute_script.return_value = [7, 640]
    assert source.poll() == 7
    driver.execute_script.return_value = [0, 640]
    assert source.poll() == 0

    assert seen == [640.0]


def test_poll_without_listeners_skips_the_page(page, driver):
    source = SeleniumScrollSource(page)
    assert source.poll() == 0
    driver.execute_script.assert_not_called()


def test_poll_error_skips_tick(page, driver, emitter):
    source = SeleniumScrollSource(page)
    driver.execute_script.return_value = True
    seen = []
    source.add_listener(seen.append)

    driver.execute_script.side_effect = WebDriverException("tab crashed")
    assert source.poll() == 0
    assert seen == []
    assert emitter.counters.get("scroll.poll_errors") == 1


def test_observer_over_selenium_source_tears_down(page, driver):
    clock = FakeClock()
    loop = HostLoop(clock=clock)
    source = SeleniumScrollSource(page)
    observer = ScrollObserver(source, loop, quiescence_s=0.15)
    driver.execute_script.return_value = True

    ticks = []
    dispose = observer.observe(lambda: ticks.append(observer.state.scroll_y))
    driver.execute_script.return_value = [2, 90]
    loop.turn()
    assert ticks == [90.0]

    driver.execute_script.return_value = True
    dispose()
    assert source.listener_count() == 0
    assert loop.pending_timers() == 0
    assert "removeEventListener" in driver.execute_script.call_args.args[0]
