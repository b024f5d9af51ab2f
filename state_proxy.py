"""
Copy-on-write drafts over frozen object graphs.

`produce(base, recipe)` hands `recipe` a draft of `base`. Reads go to the base
until something is written, at which point the written node and every ancestor
take one shallow copy. Finalizing returns the untouched base for subtrees that
were never written and frozen copies for the ones that were, so callers can use
`is` to detect "nothing changed".

Drafts are revoked when their `produce` call returns. Finalized objects are
frozen, and writing to them raises FrozenError.
"""
import contextlib
import contextvars
import copy as copy_module
import inspect
import logging
import types
from typing import Any, Callable

logger = logging.getLogger(__name__)

type Patch = tuple[list, Any, Any]

_MISSING = object()


class FrozenError(TypeError):
    pass


class DraftRevokedError(RuntimeError):
    pass


class Freezable:
    """
    Mixin for records that become immutable once finalized. Plain attribute
    assignment works until freeze() is called.
    """

    _frozen = False

    def __setattr__(self, name, value):
        if self._frozen:
            raise FrozenError(f"cannot set {name!r} on frozen {type(self).__name__}")
        object.__setattr__(self, name, value)

    def __delattr__(self, name):
        if self._frozen:
            raise FrozenError(f"cannot delete {name!r} on frozen {type(self).__name__}")
        object.__delattr__(self, name)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self):
        object.__setattr__(self, "_frozen", True)
        return self


def _blocked(name):
    def method(self, *args, **kwargs):
        raise FrozenError(f"cannot call {name}() on a frozen {type(self).__name__}")

    method.__name__ = name
    return method


class FrozenList(list):
    __setitem__ = _blocked("__setitem__")
    __delitem__ = _blocked("__delitem__")
    __iadd__ = _blocked("__iadd__")
    __imul__ = _blocked("__imul__")
    append = _blocked("append")
    extend = _blocked("extend")
    insert = _blocked("insert")
    pop = _blocked("pop")
    remove = _blocked("remove")
    clear = _blocked("clear")
    sort = _blocked("sort")
    reverse = _blocked("reverse")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return FrozenList(copy_module.deepcopy(list(self), memo))

    def __reduce__(self):
        return (FrozenList, (list(self),))

    def thaw(self) -> list:
        return list(self)


class FrozenDict(dict):
    __setitem__ = _blocked("__setitem__")
    __delitem__ = _blocked("__delitem__")
    __ior__ = _blocked("__ior__")
    pop = _blocked("pop")
    popitem = _blocked("popitem")
    clear = _blocked("clear")
    update = _blocked("update")
    setdefault = _blocked("setdefault")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return FrozenDict(copy_module.deepcopy(dict(self), memo))

    def __reduce__(self):
        return (FrozenDict, (dict(self),))

    def thaw(self) -> dict:
        return dict(self)


def is_draftable(value) -> bool:
    return isinstance(value, (list, dict, Freezable)) and not isinstance(value, Draft)


def is_frozen(value) -> bool:
    if isinstance(value, (FrozenList, FrozenDict)):
        return True
    return isinstance(value, Freezable) and value.frozen


def freeze(value):
    """
    Deep-freeze a freshly built value: Freezable records are frozen in place,
    lists and dicts become FrozenList and FrozenDict. Already frozen values are
    returned as-is.
    """
    if isinstance(value, Draft) or is_frozen(value):
        return value
    if isinstance(value, list):
        return FrozenList(freeze(v) for v in value)
    if isinstance(value, dict):
        return FrozenDict((k, freeze(v)) for k, v in value.items())
    if isinstance(value, Freezable):
        for name, attr in list(vars(value).items()):
            frozen_attr = freeze(attr)
            if frozen_attr is not attr:
                object.__setattr__(value, name, frozen_attr)
        return value.freeze()
    return value


def shallow_copy(value):
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    new = object.__new__(type(value))
    new.__dict__.update(value.__dict__)
    new.__dict__.pop("_frozen", None)
    return new


def _read(source, key, default=_MISSING):
    try:
        if isinstance(source, (list, dict)):
            return source[key]
        return source.__dict__[key]
    except (IndexError, KeyError):
        if default is _MISSING:
            raise
        return default


def _write(target, key, value):
    if isinstance(target, list):
        list.__setitem__(target, key, value)
    elif isinstance(target, dict):
        dict.__setitem__(target, key, value)
    else:
        target.__dict__[key] = value


def _items(source):
    if isinstance(source, list):
        return list(enumerate(source))
    if isinstance(source, dict):
        return list(source.items())
    return list(source.__dict__.items())


_current_scope: contextvars.ContextVar["DraftScope | None"] = contextvars.ContextVar(
    "draft_scope", default=None
)


def current_scope() -> "DraftScope | None":
    """The innermost produce() call in progress, if any."""
    return _current_scope.get()


class DraftState:
    """Bookkeeping behind one draft node."""

    __slots__ = (
        "base",
        "parent",
        "key",
        "scope",
        "copy",
        "modified",
        "finalized",
        "children",
        "revoked",
        "draft",
    )

    def __init__(self, base, parent: "DraftState | None", key, scope: "DraftScope"):
        self.base = base
        self.parent = parent
        self.key = key
        self.scope = scope
        self.copy = None
        self.modified = False
        self.finalized = _MISSING
        self.children: dict = {}
        self.revoked = False
        self.draft: Draft

    @property
    def source(self):
        return self.copy if self.modified else self.base

    def path(self) -> list:
        if self.parent is None:
            return []
        return self.parent.path() + [self.key]

    def assert_live(self):
        if self.revoked:
            raise DraftRevokedError("draft used after its produce() call finished")

    def mark_changed(self):
        if self.modified:
            return
        self.modified = True
        self.copy = shallow_copy(self.base)
        for key, child in self.children.items():
            _write(self.copy, key, child.draft)
        if self.parent is not None:
            self.parent.mark_changed()

    def get(self, key):
        self.assert_live()
        value = _read(self.source, key)
        if isinstance(value, Draft):
            return value

        child = self.children.get(key)
        if child is not None:
            return child.draft

        if is_draftable(value) and self._from_base(key, value):
            child = self.scope.make_state(value, self, key)
            self.children[key] = child
            if self.modified:
                _write(self.copy, key, child.draft)
            return child.draft
        return value

    def _from_base(self, key, value) -> bool:
        # values assigned during this produce() are fresh and need no draft
        if value is _read(self.base, key, None):
            return True
        return isinstance(self.base, list) and any(value is v for v in self.base)

    def set(self, key, value):
        self.assert_live()
        old = _read(self.source, key, None)
        if not self.modified and value is old:
            return

        self.mark_changed()
        child = self.children.get(key)
        if child is not None and value is not child.draft:
            del self.children[key]
        _write(self.copy, key, value)
        self.scope.record(self.path() + [key], unwrap(old), unwrap(value))

    def restructure(self, op: Callable[[list], Any]):
        """Apply a structural list operation (insert, pop, ...) to the copy."""
        self.assert_live()
        before = list(unwrap(v) for v in self.source)
        self.mark_changed()
        result = op(self.copy)
        self.children = {}
        for i, v in enumerate(self.copy):
            if isinstance(v, Draft) and v._state.parent is self:
                v._state.key = i
                self.children[i] = v._state
        self.scope.record(self.path(), before, list(unwrap(v) for v in self.copy))
        return result


def unwrap(value):
    """The current plain value behind a draft, or the value itself."""
    if isinstance(value, Draft):
        return value._state.source
    return value


def original(draft):
    """The base value a draft was created from."""
    assert isinstance(draft, Draft)
    return draft._state.base


class Draft:
    __slots__ = ("_state",)

    def __init__(self, state: DraftState):
        object.__setattr__(self, "_state", state)

    def __repr__(self):
        return f"<draft of {self._state.source!r}>"


class ObjectDraft(Draft):
    __slots__ = ()

    @property
    def __class__(self):
        return type(object.__getattribute__(self, "_state").base)

    def __getattr__(self, name):
        state: DraftState = object.__getattribute__(self, "_state")
        state.assert_live()
        source = state.source
        if name in source.__dict__:
            return state.get(name)

        attr = inspect.getattr_static(type(source), name)
        if isinstance(attr, property):
            return attr.fget(self)
        if isinstance(attr, (staticmethod, classmethod)):
            return getattr(source, name)
        if inspect.isfunction(attr):
            return types.MethodType(attr, self)
        return attr

    def __setattr__(self, name, value):
        object.__getattribute__(self, "_state").set(name, value)

    def __delattr__(self, name):
        raise FrozenError(f"cannot delete {name!r} through a draft")


class ListDraft(Draft):
    __slots__ = ()
    __hash__ = None  # type: ignore[assignment]

    @property
    def __class__(self):
        return type(self._state.base)

    def _index(self, i):
        n = len(self._state.source)
        if i < 0:
            i += n
        if not 0 <= i < n:
            raise IndexError("list index out of range")
        return i

    def __getitem__(self, i):
        if isinstance(i, slice):
            return [self[j] for j in range(*i.indices(len(self)))]
        return self._state.get(self._index(i))

    def __setitem__(self, i, value):
        if isinstance(i, slice):
            def op(target):
                target[i] = value

            self._state.restructure(op)
            return
        self._state.set(self._index(i), value)

    def __delitem__(self, i):
        def op(target):
            del target[i]

        self._state.restructure(op)

    def __len__(self):
        self._state.assert_live()
        return len(self._state.source)

    def __iter__(self):
        for i in range(len(self)):
            yield self._state.get(i)

    def __contains__(self, value):
        return any(v is value or unwrap(v) == unwrap(value) for v in self)

    def __eq__(self, other):
        other = unwrap(other)
        if not isinstance(other, (list, tuple)):
            return NotImplemented
        return [unwrap(v) for v in self._state.source] == [unwrap(v) for v in other]

    def __add__(self, other):
        return list(self) + list(other)

    def __iadd__(self, other):
        self.extend(other)
        return self

    def append(self, value):
        self._state.restructure(lambda target: target.append(value))

    def extend(self, values):
        values = list(values)
        self._state.restructure(lambda target: target.extend(values))

    def insert(self, i, value):
        self._state.restructure(lambda target: target.insert(i, value))

    def pop(self, i=-1):
        return unwrap(self._state.restructure(lambda target: target.pop(i)))

    def remove(self, value):
        i = self.index(value)
        self._state.restructure(lambda target: target.pop(i))

    def clear(self):
        self._state.restructure(lambda target: target.clear())

    def index(self, value):
        for i, v in enumerate(self):
            if v is value or unwrap(v) == unwrap(value):
                return i
        raise ValueError(f"{value!r} is not in list")

    def count(self, value):
        return sum(1 for v in self if v is value or unwrap(v) == unwrap(value))


class DictDraft(Draft):
    __slots__ = ()
    __hash__ = None  # type: ignore[assignment]

    @property
    def __class__(self):
        return type(self._state.base)

    def __getitem__(self, key):
        return self._state.get(key)

    def __setitem__(self, key, value):
        self._state.set(key, value)

    def __delitem__(self, key):
        state = self._state
        state.assert_live()
        old = _read(state.source, key)
        state.mark_changed()
        dict.__delitem__(state.copy, key)
        state.children.pop(key, None)
        state.scope.record(state.path() + [key], unwrap(old), None)

    def __contains__(self, key):
        self._state.assert_live()
        return key in self._state.source

    def __len__(self):
        self._state.assert_live()
        return len(self._state.source)

    def __iter__(self):
        self._state.assert_live()
        return iter(list(self._state.source))

    def __eq__(self, other):
        other = unwrap(other)
        if not isinstance(other, dict):
            return NotImplemented
        mine = {k: unwrap(v) for k, v in self._state.source.items()}
        return mine == {k: unwrap(v) for k, v in other.items()}

    def keys(self):
        return list(self)

    def values(self):
        return [self[k] for k in self]

    def items(self):
        return [(k, self[k]) for k in self]

    def get(self, key, default=None):
        return self[key] if key in self else default

    def pop(self, key, default=_MISSING):
        if key not in self:
            if default is _MISSING:
                raise KeyError(key)
            return default
        value = unwrap(self[key])
        del self[key]
        return value

    def setdefault(self, key, default=None):
        if key not in self:
            self[key] = default
        return self[key]

    def update(self, other=(), **kwargs):
        for key, value in dict(other, **kwargs).items():
            self[key] = value


def _finalize_value(value, scope: "DraftScope"):
    if isinstance(value, Draft):
        state = value._state
        if state.scope is not scope:
            raise DraftRevokedError("draft from another produce() call leaked into this one")
        return _finalize(state)
    if isinstance(value, list) and not isinstance(value, FrozenList):
        return FrozenList(_finalize_value(v, scope) for v in value)
    if isinstance(value, dict) and not isinstance(value, FrozenDict):
        return FrozenDict((k, _finalize_value(v, scope)) for k, v in value.items())
    if isinstance(value, Freezable) and not value.frozen:
        # a record built inside the recipe
        for name, attr in list(vars(value).items()):
            new = _finalize_value(attr, scope)
            if new is not attr:
                object.__setattr__(value, name, new)
        return value.freeze()
    return value


def _finalize(state: DraftState):
    if not state.modified:
        return state.base
    if state.finalized is not _MISSING:
        return state.finalized

    result = state.copy
    for key, value in _items(result):
        if not isinstance(value, Draft) and state._from_base(key, value):
            continue
        new = _finalize_value(value, state.scope)
        if new is not value:
            _write(result, key, new)

    if isinstance(result, list):
        result = FrozenList(result)
    elif isinstance(result, dict):
        result = FrozenDict(result)
    else:
        result.freeze()

    state.finalized = result
    return result


class DraftScope(contextlib.AbstractContextManager):
    """
    One produce() call. Entering yields the root draft; a clean exit finalizes it
    into `result`. Every draft created inside is revoked on exit either way.
    """

    def __init__(self, base, on_patches: Callable[[list[Patch]], None] | None = None):
        assert is_draftable(base), f"cannot draft a {type(base).__name__}"
        self.base = base
        self.on_patches = on_patches
        self.patches: list[Patch] = []
        self.states: list[DraftState] = []
        self.result = None
        self.replacement = _MISSING
        self._token = None
        self._root: DraftState | None = None

    def make_state(self, base, parent, key) -> DraftState:
        state = DraftState(base, parent, key, self)
        if isinstance(base, list):
            state.draft = ListDraft(state)
        elif isinstance(base, dict):
            state.draft = DictDraft(state)
        else:
            state.draft = ObjectDraft(state)
        self.states.append(state)
        return state

    def record(self, path, old, new):
        self.patches.append((path, old, new))

    def __enter__(self):
        self._token = _current_scope.set(self)
        self._root = self.make_state(self.base, None, None)
        return self._root.draft

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is None:
                assert self._root is not None
                if self.replacement is not _MISSING:
                    self.result = _finalize_value(self.replacement, self)
                else:
                    self.result = _finalize(self._root)
                if self.on_patches is not None and self.patches:
                    self.on_patches(list(self.patches))
        finally:
            for state in self.states:
                state.revoked = True
            _current_scope.reset(self._token)
        return False


def produce(base, recipe, on_patches=None):
    """
    Return `base` with the writes `recipe` makes to its draft applied. `base` is
    never modified. If nothing was written, `base` itself is returned.
    """
    scope = DraftScope(base, on_patches)
    with scope as draft:
        returned = recipe(draft)
        if returned is not None and returned is not draft:
            scope.replacement = returned
    if scope.patches:
        logger.debug("produce applied %d patches", len(scope.patches))
    return scope.result
