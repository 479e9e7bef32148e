import pytest

from zaplog.exit import exit_with, stub, with_stub


@pytest.mark.parametrize(
    "func, exited, code",
    [(lambda: exit_with(42), True, 42), (lambda: None, False, 0)],
)
def test_with_stub(func, exited, code):
    stubbed = with_stub(func)
    assert stubbed.exited is exited
    assert stubbed.code == code


def test_real_exit_raises_system_exit():
    with pytest.raises(SystemExit) as info:
        exit_with(3)
    assert info.value.code == 3


def test_unstub_restores_real_exit():
    stubbed = stub()
    try:
        exit_with(1)
    finally:
        stubbed.unstub()
    assert (stubbed.exited, stubbed.code) == (True, 1)
    with pytest.raises(SystemExit):
        exit_with(2)


def test_nested_stubs_restore_in_order():
    outer = stub()
    try:
        inner = with_stub(lambda: exit_with(7))
        exit_with(5)
    finally:
        outer.unstub()
    assert (inner.exited, inner.code) == (True, 7)
    assert (outer.exited, outer.code) == (True, 5)


def test_stub_restored_even_if_function_raises():
    def boom():
        exit_with(9)
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        with_stub(boom)
    with pytest.raises(SystemExit) as info:
        exit_with(4)
    assert info.value.code == 4