"""
Tether binder: find a method by name on a live object and bind it to parsers.

What this module provides
- bind(target, name, registry, *, arity, **options) → Binding
  • collects every method `target` exposes under `name`: the attribute of that
    name plus any method marked with @alias(name);
  • reads each candidate's signature and resolves every parameter type in the
    registry (default: a frozen SimpleParserRegistry);
  • keeps the candidates whose parameters all resolve, breaks ties by arity,
    and returns an immutable Binding.
  bind() performs no reading: resolution is purely over declared types.
- alias(*names): decorator exposing a method under extra names (several
  methods may share one alias; they then compete as overloads).
- invoke(object, prompt, registry): convenience runner for a Binding or a plain callable.

Failures (raised before any Binding exists)
- UnknownMethodError: nothing callable is exposed under the name.
- UnresolvedParserError: candidates exist, but each has a parameter type no
  registry rule resolves (or a *args/**kwargs parameter).
- AmbiguousMethodError: several candidates resolve and the arity tie-break
  does not single one out.

Quick example:
    >>> class Bank:
    ...     def lend_money(self, name: str, amount: int) -> bool:
    ...         return amount < 200
    >>> bind(Bank(), "lend_money").invoke("Luke 100")
    True
"""
import difflib
import logging
import types

from .bindings import Binding
from .faults import AmbiguousMethodError, UnknownMethodError, UnresolvedParserError
from .registries import SimpleParserRegistry
from .signatures import Signature
from .utils import Unset, coalesce, rename

logger = logging.getLogger(__name__)

# Shared, read-only fallback used when bind() receives no registry.
DEFAULT_REGISTRY = SimpleParserRegistry().freeze()


def _label(method):
    return getattr(method, "__qualname__", None) or repr(method)


def _describe(target):
    if isinstance(target, (type, types.ModuleType)):
        return target.__name__
    return "%s object" % type(target).__name__


def _candidates(target, name):
    """
    Return the distinct callables `target` exposes under `name`, most derived first.
    """
    if isinstance(target, type):
        namespaces = [vars(owner) for owner in target.__mro__]
    else:
        namespaces = [vars(owner) for owner in type(target).__mro__]
        if isinstance(target, types.ModuleType):
            namespaces.insert(0, vars(target))

    seen = set()
    functions = set()
    candidates = []

    for namespace in namespaces:
        for attribute, member in namespace.items():
            if attribute in seen:
                continue
            seen.add(attribute)

            function = getattr(member, "__func__", member)
            if attribute != name and name not in getattr(function, "__aliases__", ()):
                continue
            if not callable(member) and not isinstance(member, classmethod):
                continue
            if id(function) in functions:
                continue
            functions.add(id(function))
            candidates.append(getattr(target, attribute))

    # Instance attributes and dynamic lookups (__getattr__).
    if name not in seen and callable(method := getattr(target, name, None)):
        candidates.append(method)

    return candidates


def _suggest(target, name):
    names = [attribute for attribute in dir(target) if not attribute.startswith("_")]
    try:
        return "did you mean %r?" % difflib.get_close_matches(name, names, 1)[0]
    except IndexError:
        return "check the method name or expose the method with @alias(%r)" % name


def _resolve(signature, registry):
    """
    Resolve one parser per slot; return (parsers, None) or (None, offending slot).
    """
    parsers = []
    for slot in signature:
        if slot.variadic:
            return None, slot
        if (parser := registry.resolve(slot.type)) is None:
            return None, slot
        parsers.append(parser)
    return tuple(parsers), None


def _select(viable, arity, name):
    """
    Pick one (method, signature, parsers) triple among the viable candidates.
    """
    if len(viable) == 1:
        return viable[0]

    tied = viable
    if arity is not Unset:
        exact = [candidate for candidate in viable if len(candidate[1]) == arity]
        if len(exact) == 1:
            return exact[0]
        if not exact:
            accepting = [candidate for candidate in viable if candidate[1].accepts(arity)]
            if len(accepting) == 1:
                return accepting[0]
            tied = accepting or viable
        else:
            tied = exact

    raise AmbiguousMethodError(
        "%d methods match %r: %s" % (
            len(tied),
            name,
            "; ".join("%s%s" % (_label(method), signature) for method, signature, _ in tied),
        ),
        name=name,
        candidates=tuple(method for method, _, _ in tied),
        hint=(
            "pass arity=... to bind() or give the methods distinct aliases"
            if arity is Unset else
            "give the methods distinct aliases or different parameter counts"
        ),
    )


def bind(target, name=Unset, /, registry=Unset, *, arity=Unset, **options):
    """
    Bind the method `target` exposes under `name` to parsers from `registry`.

    Parameters
    - target: object
      Instance, class or module owning the method. When name is omitted,
      target itself must be callable and is bound directly.
    - name: Unset | str
      Method name or alias to look up.
    - registry: Unset | ParserRegistry
      Registry resolving parameter types (default: a frozen SimpleParserRegistry).
    - arity: Unset | int
      Expected argument count, used only to break ties between overloads.
    - **options: runtime options of the Binding (shell, fancy, colorful).

    Returns
    - Binding

    Raises
    - UnknownMethodError, UnresolvedParserError, AmbiguousMethodError.
    - TypeError: on malformed arguments.
    """
    if name is Unset:
        if not callable(target):
            raise TypeError("bind() argument must be callable when no name is given")
        candidates = [target]
        owner = getattr(target, "__self__", target)
        name = getattr(target, "__name__", type(target).__name__)
    else:
        if not isinstance(name, str):
            raise TypeError("bind() second argument must be a string")
        candidates = _candidates(target, name)
        owner = target
    if not isinstance(arity, int | Unset) or isinstance(arity, bool):
        raise TypeError("bind() 'arity' must be an integer")

    registry = coalesce(registry, DEFAULT_REGISTRY)

    if not candidates:
        raise UnknownMethodError(
            "%s has no method named %r" % (_describe(target), name),
            name=name,
            target=target,
            hint=_suggest(target, name),
        )

    logger.debug("bind(): %d candidate(s) for %r on %s", len(candidates), name, _describe(target))

    viable = []
    unresolved = []
    for method in candidates:
        try:
            signature = Signature.of(method)
        except (TypeError, ValueError):
            # Some builtins expose no signature at all.
            unresolved.append((method, None))
            continue

        parsers, slot = _resolve(signature, registry)
        if parsers is None:
            logger.debug("bind(): rejecting %s%s, %s unresolved", _label(method), signature, slot)
            unresolved.append((method, slot))
            continue
        viable.append((method, signature, parsers))

    if not viable:
        method, slot = unresolved[0]
        label = _label(method)
        if slot is None:
            raise UnresolvedParserError(
                "cannot read the signature of %s" % label,
                name=name,
                hint="bind a python function or method instead",
            )
        if slot.variadic:
            raise UnresolvedParserError(
                "parameter %r of %s is variadic" % (slot.name, label),
                name=name,
                parameter=slot.name,
                type=slot.type,
                hint="replace *%s with explicit parameters" % slot.name,
            )
        raise UnresolvedParserError(
            "no parser for parameter %r of type %s in %s" % (
                slot.name,
                getattr(slot.type, "__name__", slot.type),
                label,
            ),
            name=name,
            parameter=slot.name,
            type=slot.type,
            hint="register a parser for %s in the registry" % getattr(slot.type, "__name__", slot.type),
        )

    method, signature, parsers = _select(viable, arity, name)
    logger.debug("bind(): bound %r to %s%s", name, _label(method), signature)
    return Binding(owner, method, signature, parsers, **options)


def alias(*names):
    """
    Expose a method under extra names.

    Usage
        class Bank:
            @alias("lend", "borrow")
            def lend_money(self, name: str, amount: int) -> bool: ...

    Methods sharing an alias compete as overloads inside bind().
    """
    if not names:
        raise TypeError("@alias() takes at least one name")
    for name in names:
        if not isinstance(name, str):
            raise TypeError("@alias() names must be strings")
        if not name.strip():
            raise ValueError("@alias() names cannot be empty")

    @rename("alias")
    def wrapper(callback, /):
        function = getattr(callback, "__func__", callback)
        if not callable(function):
            raise TypeError("@alias() must be applied to a callable")
        function.__aliases__ = frozenset(getattr(function, "__aliases__", ())) | frozenset(names)
        return callback

    return wrapper


def invoke(object, prompt, /, registry=Unset):
    """
    Convenience runner for bindings or plain callables.

    - Binding: invoke it with prompt (and registry, when given).
    - plain callable: bind it (against registry, when given) and invoke it.
    """
    if isinstance(object, Binding):
        return object.invoke(prompt, registry)
    if callable(object):
        return bind(object, Unset, registry).invoke(prompt)
    raise TypeError("invoke() first argument must be a binding or a callable")


__all__ = (
    "bind",
    "alias",
    "invoke",
    "DEFAULT_REGISTRY",
)
