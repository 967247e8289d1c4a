import threading

import pytest

from ftdc.catcher import Catcher, CatcherError


@pytest.fixture
def catcher():
    return Catcher()


def test_initial_values(catcher):
    assert not catcher.has_errors()
    assert len(catcher) == 0
    assert str(catcher) == ""


def test_add_impacts_state(catcher):
    catcher.add(ValueError("foo"))
    assert catcher.has_errors()
    assert len(catcher) == 1


def test_adding_none_does_not_change_state(catcher):
    for _ in range(100):
        catcher.add(None)
    assert not catcher.has_errors()
    assert len(catcher) == 0


def test_adding_many_errors(catcher):
    for i in range(1, 101):
        catcher.add(ValueError(str(i)))
        assert catcher.has_errors()
        assert len(catcher) == i
    assert len(catcher) == 100


def test_resolve_without_errors_returns_none(catcher):
    assert catcher.resolve() is None
    for _ in range(100):
        catcher.add(None)
        assert catcher.resolve() is None
    assert len(catcher) == 0


def test_resolve_does_not_clear_state(catcher):
    for i in range(1, 11):
        catcher.add(ValueError(str(i)))
    assert len(catcher) == 10
    with pytest.raises(CatcherError) as info:
        catcher.resolve()
    assert str(info.value) == "\n".join(str(i) for i in range(1, 11))
    assert catcher.has_errors()
    assert len(catcher) == 10


def test_concurrent_adding(catcher):
    threads = [
        threading.Thread(target=catcher.add, args=(ValueError(f"adding err #{i}"),))
        for i in range(256)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(catcher) == 256


def test_errors_and_extend(catcher):
    for i in range(1, 11):
        catcher.add(ValueError(str(i)))
    errs = catcher.errors()
    assert len(catcher) == 10
    assert len(errs) == 10
    catcher.extend(errs)
    assert len(catcher) == 20


def test_extend_with_empty_set(catcher):
    catcher.extend(catcher.errors())
    assert len(catcher) == 0


def test_extend_with_none_errors(catcher):
    catcher.extend([None, ValueError("what"), None])
    assert len(catcher) == 1


def test_add_when_none(catcher):
    catcher.add_when(True, None)
    assert len(catcher) == 0
    catcher.add_when(False, None)
    assert len(catcher) == 0


def test_add_when_error_and_false(catcher):
    catcher.add_when(False, ValueError("f"))
    assert len(catcher) == 0
    catcher.add_when(True, ValueError("f"))
    assert len(catcher) == 1
    catcher.add_when(False, ValueError("f"))
    assert len(catcher) == 1


def test_extend_when_empty(catcher):
    catcher.extend_when(True, [])
    catcher.extend_when(False, [])
    catcher.extend_when(True, None)
    catcher.extend_when(False, None)
    assert len(catcher) == 0


def test_extend_when_error_and_false(catcher):
    catcher.extend_when(False, [ValueError("f")])
    assert len(catcher) == 0
    catcher.extend_when(True, [ValueError("f")])
    assert len(catcher) == 1
    catcher.extend_when(False, [ValueError("f")])
    assert len(catcher) == 1
    catcher.extend_when(False, [ValueError("f"), ValueError("f")])
    assert len(catcher) == 1
    catcher.extend_when(True, [ValueError("f"), ValueError("f")])
    assert len(catcher) == 3


def test_new_empty(catcher):
    catcher.new("")
    assert len(catcher) == 0


def test_new_add(catcher):
    catcher.new("one")
    assert len(catcher) == 1
    assert "one" in str(catcher.errors()[0])


def test_wrap_none(catcher):
    catcher.wrap(None, "foo")
    assert len(catcher) == 0


def test_wrapf_none(catcher):
    catcher.wrapf(None, "foo:%s", True)
    assert len(catcher) == 0


def test_wrap_populated(catcher):
    catcher.wrap(ValueError("foo"), "bar")
    assert len(catcher) == 1
    text = str(catcher.errors()[0])
    assert "foo" in text
    assert "bar" in text


def test_wrapf_populated(catcher):
    catcher.wrapf(ValueError("foo"), "bar: %s", "this")
    assert len(catcher) == 1
    text = str(catcher.errors()[0])
    assert "foo" in text
    assert "bar: this" in text


def test_wrap_empty_annotation(catcher):
    catcher.wrap(ValueError("foo"), "")
    assert len(catcher) == 1
    assert "foo" in str(catcher.errors()[0])


def test_wrapf_empty_annotation(catcher):
    catcher.wrapf(ValueError("foo"), "")
    assert len(catcher) == 1
    assert "foo" in str(catcher.errors()[0])


def test_new_when(catcher):
    catcher.new_when(False, "")
    assert len(catcher) == 0
    catcher.new_when(False, "one")
    assert len(catcher) == 0
    catcher.new_when(True, "one")
    assert len(catcher) == 1
    catcher.new_when(True, "")
    assert len(catcher) == 1
    catcher.new_when(False, "one")
    assert len(catcher) == 1


def test_errorf_empty_cases(catcher):
    catcher.errorf("")
    assert len(catcher) == 0
    catcher.errorf("", True, False)
    assert len(catcher) == 0


def test_errorf_when_empty_cases(catcher):
    catcher.errorf_when(True, "")
    catcher.errorf_when(True, "", True, False)
    catcher.errorf_when(False, "")
    catcher.errorf_when(False, "", True, False)
    assert len(catcher) == 0


def test_errorf_no_args(catcher):
    catcher.errorf("%s what")
    assert len(catcher) == 1
    assert "%s what" in str(catcher.errors()[0])


def test_errorf_when_no_args(catcher):
    catcher.errorf_when(False, "%s what")
    assert len(catcher) == 0
    catcher.errorf_when(True, "%s what")
    assert len(catcher) == 1
    assert "%s what" in str(catcher.errors()[0])


def test_errorf_full(catcher):
    catcher.errorf("%s what", "this")
    assert len(catcher) == 1
    assert "this what" in str(catcher.errors()[0])


def test_errorf_when_full(catcher):
    catcher.errorf_when(False, "%s what", "this")
    assert len(catcher) == 0
    catcher.errorf_when(True, "%s what", "this")
    assert len(catcher) == 1
    assert "this what" in str(catcher.errors()[0])


def test_check_when_error(catcher):
    def fn():
        raise ValueError("hi")

    catcher.check_when(False, fn)
    assert len(catcher) == 0
    catcher.check_when(True, fn)
    assert len(catcher) == 1
    catcher.check(fn)
    assert len(catcher) == 2
    assert str(catcher.errors()[0]) == "hi"


def test_check_returned_error(catcher):
    catcher.check(lambda: ValueError("returned"))
    assert [str(e) for e in catcher.errors()] == ["returned"]


def test_check_when_no_error(catcher):
    def fn():
        return None

    catcher.check_when(False, fn)
    catcher.check_when(True, fn)
    catcher.check(fn)
    assert len(catcher) == 0