"""Tests for HostControl: PIN, permission flags, busy indicator."""
import threading

from raindrops.base.control import HostControl, Permissions, generate_pin


def test_generate_pin_is_zero_padded_digits():
    for _ in range(50):
        pin = generate_pin(4)
        assert len(pin) == 4
        assert pin.isdigit()
    assert len(generate_pin(6)) == 6


def test_fixed_pin_is_kept():
    control = HostControl(pin="0427")
    assert control.pin == "0427"
    assert control.check_pin("0427")
    assert not control.check_pin("0428")
    assert not control.check_pin("")
    assert not control.check_pin(None)


def test_random_pin_when_none_given():
    control = HostControl(pin_length=5)
    assert len(control.pin) == 5
    assert control.check_pin(control.pin)


def test_regenerate_pin_invalidates_previous():
    control = HostControl(pin="1111")
    new_pin = control.regenerate_pin()
    while new_pin == "1111":
        new_pin = control.regenerate_pin()

    assert control.pin == new_pin
    assert not control.check_pin("1111")
    assert control.check_pin(new_pin)


def test_permissions_default_on():
    control = HostControl(pin="1234")
    assert control.read_allowed
    assert control.write_allowed
    assert control.permissions() == Permissions(read=True, write=True)


def test_set_permissions_changes_only_given_flags():
    control = HostControl(pin="1234")

    assert control.set_permissions(write=False) == Permissions(read=True, write=False)
    assert control.read_allowed
    assert not control.write_allowed

    control.set_permissions(read=False)
    assert control.permissions().to_dict() == {"read": False, "write": False}


def test_busy_notifies_status_observers():
    control = HostControl(pin="1234")
    seen = []
    control.on_status(seen.append)

    control.set_busy(True)
    assert control.busy
    control.set_busy(False)
    assert not control.busy

    assert seen == [True, False]


def test_failing_observer_does_not_block_others():
    control = HostControl(pin="1234")
    calls = []

    def broken(*_args):
        raise RuntimeError("observer crashed")

    control.on_status(broken)
    control.on_status(calls.append)
    control.on_refresh(broken)
    control.on_refresh(lambda: calls.append("refresh"))

    control.set_busy(True)
    control.notify_refresh()

    assert calls == [True, "refresh"]


def test_flags_are_safe_across_threads():
    control = HostControl(pin="1234")

    def toggle():
        for i in range(500):
            control.set_permissions(read=bool(i % 2), write=not bool(i % 2))

    threads = [threading.Thread(target=toggle) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    perms = control.permissions()
    assert perms.read != perms.write
