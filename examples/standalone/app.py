"""Standalone: the stack page on its own, served at "/".

No gate is applied, so only run this where the page may be seen.
Environment keys containing "internal" are masked on top of the
defaults.

Run:
    python app.py
"""

from stackpeek import AppConfig, InspectorConfig, create_app
from stackpeek.config import DEFAULT_SECRET_PATTERNS

app = create_app(
    InspectorConfig(
        title="Standalone stack",
        secret_patterns=(*DEFAULT_SECRET_PATTERNS, "internal"),
        env_limit=50,
    ),
    AppConfig(name="standalone", port=8080),
)


if __name__ == "__main__":
    app.run()
