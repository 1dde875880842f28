from typing import Callable, Dict, List
import functools

from eventreg.bus import EventRegistry

# Each scenario builds its own registries, emits, and returns the lines its
# handlers produced. Extra keyword arguments go to every EventRegistry built.


class Foo:
    """Functor handler: callable as foo(key, arg)."""

    def __init__(self, out: List[str]) -> None:
        self.out = out

    def __call__(self, key, arg) -> None:
        self.callback(key, arg)

    def callback(self, key, arg) -> None:
        self.out.append(f"The argument {arg}")


def lambda_handler(**kw) -> List[str]:
    # plain function with a simple argument
    out: List[str] = []
    bus = EventRegistry(**kw)
    bus.on(1, lambda key, arg: out.append(f"The argument {arg}"))
    bus.emit(1, 1)
    bus.close()
    return out


def object_argument(**kw) -> List[str]:
    # the argument itself is a functor; the handler calls it
    out: List[str] = []
    bus = EventRegistry(**kw)
    bus.on(2, lambda key, foo: foo(key, 2))
    bus.emit(2, Foo(out))
    bus.close()
    return out


def captured_object(**kw) -> List[str]:
    # the handler closes over an object the caller owns
    out: List[str] = []
    foo = Foo(out)
    bus = EventRegistry(**kw)
    bus.on(3, lambda key, arg: foo(key, arg))
    bus.emit(3, 3)
    bus.close()
    return out


def bound_method(**kw) -> List[str]:
    out: List[str] = []
    foo = Foo(out)
    bus = EventRegistry(**kw)
    bus.on(4, foo.callback)
    bus.emit(4, 4)
    bus.close()
    return out


def partial_handler(**kw) -> List[str]:
    # pre-bind the receiver of an unbound method
    out: List[str] = []
    bus = EventRegistry(**kw)
    bus.on(5, functools.partial(Foo.callback, Foo(out)))
    bus.emit(5, 5)
    bus.close()
    return out


def functor_fan_out(**kw) -> List[str]:
    # three functors on key 6, one on key 7, then off(6)
    out: List[str] = []
    bus = EventRegistry(**kw)
    bus.on(6, Foo(out))
    bus.on(6, Foo(out))
    bus.on(6, Foo(out))
    bus.on(7, Foo(out))
    bus.emit(6, 6)
    bus.emit(7, 7)

    bus.off(6)
    bus.emit(6, 6)
    bus.close()
    return out


SCENARIOS: Dict[str, Callable[..., List[str]]] = {
    "1": lambda_handler,
    "2": object_argument,
    "3": captured_object,
    "4": bound_method,
    "5": partial_handler,
    "6": functor_fan_out,
}
