"""Turn ``"module:attribute"`` into an App, for ``run`` and ``routes``."""

import pkgutil

from stackpeek.app import App


def resolve_app(import_string: str) -> App:
    """Import *import_string* and return the App it names.

    ``"myapp"`` means ``"myapp:app"``. A callable that is not an App is
    treated as a factory and called without arguments.

    Raises:
        ModuleNotFoundError: the module cannot be imported.
        AttributeError: the module has no such attribute.
        TypeError: the target is neither an App nor a factory returning one.
    """
    if ":" not in import_string:
        import_string = f"{import_string}:app"

    target = pkgutil.resolve_name(import_string)

    if callable(target) and not isinstance(target, App):
        try:
            target = target()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(target, App):
        msg = (
            f"{import_string!r} resolved to {type(target).__name__}, "
            "not a stackpeek.App instance"
        )
        raise TypeError(msg)
    return target
