"""Self-contained inspection page renderer.

Uses plain f-strings and string concatenation, no template engine, so a
broken environment cannot prevent the page from rendering. Every dynamic
value goes through ``_esc``.

Two pages:
- Stack page: runtime, limits, modules, bytecode cache, host, environment
- Framework page: application, drivers, connectivity, packages, routes
"""

import html

from stackpeek.facts.environment import EnvSnapshot
from stackpeek.facts.framework import ConnectivityCheck, FrameworkFacts, RouteInfo
from stackpeek.facts.probe import UNAVAILABLE, Probe
from stackpeek.facts.runtime import RuntimeFacts
from stackpeek.facts.secrets import SecretPatterns
from stackpeek.facts.system import SystemFacts

# ---------------------------------------------------------------------------
# Styles and scripts
# ---------------------------------------------------------------------------

_CSS = """\
:root { --bg: #0f172a; --card: #111827; --muted: #94a3b8; --good: #22c55e; --bad: #ef4444; --warn: #f59e0b; }
* { box-sizing: border-box; }
body {
    margin: 0; padding: 24px; background: var(--bg); color: #e5e7eb;
    font-family: ui-sans-serif, system-ui, -apple-system, 'Segoe UI', Roboto, sans-serif;
    font-size: 14px; line-height: 1.5;
}
.page { max-width: 1200px; margin: 0 auto; }
header { display: flex; flex-wrap: wrap; gap: 8px; align-items: center; margin-bottom: 16px; }
h1 { font-size: 20px; margin: 0 12px 0 0; }
.chip { padding: 3px 8px; border-radius: 999px; background: #0b1220; border: 1px solid #1f2937; color: var(--muted); }
.grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(320px, 1fr)); gap: 12px; margin: 16px 0; }
.card { background: var(--card); border: 1px solid #1f2937; border-radius: 12px; padding: 14px; overflow: hidden; }
.card h3 { margin: 0 0 4px; font-size: 15px; }
.card .sub { color: var(--muted); font-size: 12px; margin-bottom: 8px; }
.wide { grid-column: 1 / -1; }
.kv { display: grid; grid-template-columns: 180px 1fr; gap: 4px 12px; }
.kv > div:nth-child(odd) { color: var(--muted); }
table { width: 100%; border-collapse: collapse; }
th, td { text-align: left; padding: 6px 8px; border-bottom: 1px solid #1f2937; vertical-align: top; }
th { color: var(--muted); font-weight: 600; }
td.key { color: #7dd3fc; white-space: nowrap; }
td.val { word-break: break-all; font-family: ui-monospace, Menlo, Consolas, monospace; font-size: 12px; }
pre { white-space: pre-wrap; word-break: break-word; margin: 0; font-size: 12px; }
code { font-family: ui-monospace, Menlo, Consolas, monospace; }
.pill { display: inline-block; padding: 2px 6px; margin: 2px; border: 1px solid #334155; border-radius: 999px; color: #cbd5e1; background: #0b1220; }
.pill.critical { border-color: var(--warn); color: var(--warn); }
.good { color: var(--good); } .bad { color: var(--bad); } .warn { color: var(--warn); }
.muted { color: var(--muted); }
.hint { color: var(--muted); font-size: 12px; margin-top: 8px; }
.toolbar { display: flex; gap: 12px; align-items: center; margin: 12px 0; }
input[type="search"] { background: #0b1220; border: 1px solid #1f2937; color: #e5e7eb; border-radius: 8px; padding: 8px 10px; min-width: 260px; }
"""

_FILTER_JS = """\
(function () {
    const q = document.getElementById('search');
    const rows = Array.from(document.querySelectorAll('#routes tbody tr'));
    const count = document.getElementById('count');
    q && q.addEventListener('input', function () {
        const val = (this.value || '').toLowerCase();
        let shown = 0;
        rows.forEach(tr => {
            const on = !val || tr.textContent.toLowerCase().includes(val);
            tr.style.display = on ? '' : 'none';
            if (on) shown++;
        });
        count.textContent = shown;
    });
})();
"""


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------


def _esc(text: object) -> str:
    """HTML-escape a value."""
    return html.escape(str(text), quote=True)


def _show(probe: Probe[object], default: str = UNAVAILABLE) -> str:
    return _esc(probe.display(default))


def _flag(ok: bool, good: str = "✅", bad: str = "❌") -> str:
    return f'<span class="good">{good}</span>' if ok else f'<span class="bad">{bad}</span>'


def _kv(rows: list[tuple[str, str]]) -> str:
    """Key/value grid. Values are expected to be escaped already."""
    items = "".join(f"<div>{_esc(label)}</div><div>{value}</div>" for label, value in rows)
    return f'<div class="kv">{items}</div>'


def _card(title: str, body: str, *, sub: str = "", wide: bool = False) -> str:
    cls = "card wide" if wide else "card"
    sub_html = f'<div class="sub">{_esc(sub)}</div>' if sub else ""
    return f'<section class="{cls}"><h3>{_esc(title)}</h3>{sub_html}{body}</section>'


def _document(title: str, header: str, body: str, *, script: str = "") -> str:
    script_html = f"<script>{script}</script>" if script else ""
    return (
        f"<!DOCTYPE html>"
        f'<html lang="en"><head>'
        f'<meta charset="utf-8">'
        f'<meta name="viewport" content="width=device-width, initial-scale=1">'
        f'<meta name="robots" content="noindex, nofollow">'
        f"<title>{_esc(title)}</title>"
        f"<style>{_CSS}</style>"
        f"</head><body>"
        f'<div class="page"><header>{header}</header>{body}</div>'
        f"{script_html}"
        f"</body></html>"
    )


# -- Stack page sections --


def _render_runtime_card(runtime: RuntimeFacts) -> str:
    rows = [
        ("Python", _esc(f"{runtime.python_version} ({runtime.implementation})")),
        ("Interface", _esc(f"ASGI {runtime.asgi_version}")),
        ("Server", _show(runtime.server_software)),
        ("OS", _esc(runtime.platform)),
        ("Executable", f"<code>{_esc(runtime.executable)}</code>"),
        ("Document root", f"<code>{_esc(runtime.document_root or '—')}</code>"),
    ]
    rows.extend((row.label, _show(row.value)) for row in runtime.limits)
    return _card("Runtime & limits", _kv(rows), sub=runtime.sys_version)


def _render_modules_card(runtime: RuntimeFacts) -> str:
    pills = "".join(
        f'<span class="pill{" critical" if m.critical else ""}">{_esc(m.name)}</span>'
        for m in runtime.modules
    )
    critical = ", ".join(m.name for m in runtime.critical_modules) or "none"
    return _card(
        "Loaded modules",
        f"<div>{pills}</div>"
        f'<div class="hint">{len(runtime.modules)} modules. Critical: {_esc(critical)}</div>',
        sub="Top-level names in sys.modules",
    )


def _render_bytecode_card(runtime: RuntimeFacts) -> str:
    stats = runtime.bytecode.get()
    if stats is None:
        body = f'<div class="muted">{_esc(UNAVAILABLE)}</div>'
    elif not stats.enabled:
        body = (
            _kv([("Enabled", _flag(False))])
            + '<div class="hint">Bytecode writing is disabled '
            "(PYTHONDONTWRITEBYTECODE or -B). Every import recompiles its source.</div>"
        )
    else:
        body = _kv(
            [
                ("Enabled", _flag(True)),
                ("pycache_prefix", _esc(stats.prefix or "—")),
                ("Cached modules", _esc(stats.cached)),
                ("Missing .pyc", _esc(stats.missing)),
                ("Cache size", _esc(stats.size)),
            ]
        )
    return _card("Bytecode cache", body)


def _render_host_card(system: SystemFacts) -> str:
    tools = system.tools
    rows = [
        ("Container", _flag(system.in_container, "✅ probably", "❌ no signal")),
        ("Hostname", _esc(system.hostname)),
        ("User", _show(system.user)),
        ("Working dir", f"<code>{_show(system.cwd)}</code>"),
        ("Script", f"<code>{_esc(system.script)}</code>"),
        ("Package manager", _show(tools.package_manager, "not found")),
        ("Git branch", _show(tools.git_branch, "n/a")),
        ("Git commit", _show(tools.git_commit, "n/a")),
    ]
    body = (
        _kv(rows)
        + "<h3>OS release</h3>"
        + f"<pre>{_show(system.os_release)}</pre>"
        + "<h3>cgroup</h3>"
        + f"<pre>{_show(system.cgroup)}</pre>"
    )
    return _card("Container / OS", body)


def _render_config_files_card(runtime: RuntimeFacts) -> str:
    files = runtime.config_files
    pth = files.pth_files.get(()) or ()
    pth_html = (
        "<br>".join(f"<code>{_esc(p)}</code>" for p in pth)
        if pth
        else '<span class="muted">none or unavailable</span>'
    )
    rows = [
        ("pyvenv.cfg", f"<code>{_show(files.pyvenv, 'not found')}</code>"),
        (".pth files", pth_html),
    ]
    return _card("Configuration files", _kv(rows))


def _render_env_card(env: EnvSnapshot, patterns: SecretPatterns) -> str:
    rows = "".join(
        f'<tr><td class="key">{_esc(row.key)}</td><td class="val">{_esc(row.value)}</td></tr>'
        for row in env.rows
    )
    more = ""
    if env.truncated:
        more = f"<div class=\"hint\">{env.hidden} more variables not shown (limit {env.limit}).</div>"
    return _card(
        "Environment snapshot",
        f"<table><tr><th>Key</th><th>Value</th></tr>{rows}</table>"
        f"{more}"
        f'<div class="hint">Naive masking of keys containing: {_esc(patterns.describe())}. '
        "Check before sharing a screenshot.</div>",
        sub="Server variables and process environment",
        wide=True,
    )


def _git_label(system: SystemFacts) -> str:
    """``branch@commit``, or whichever half is known."""
    branch = system.tools.git_branch.get("")
    commit = system.tools.git_commit.get("")
    if branch and commit:
        return f"{branch}@{commit}"
    return branch or commit


def render_stack_page(
    runtime: RuntimeFacts,
    system: SystemFacts,
    env: EnvSnapshot,
    *,
    patterns: SecretPatterns,
    title: str = "Stack Inspector",
) -> str:
    """Render the interpreter/host/environment page as a full HTML document."""
    header = (
        f"<h1>{_esc(title)}</h1>"
        f'<span class="chip">Python {_esc(runtime.python_version)}</span>'
        f'<span class="chip">ASGI {_esc(runtime.asgi_version)}</span>'
        f'<span class="chip">{_esc(runtime.os_name)}</span>'
        f'<span class="chip">{_esc(system.hostname)}</span>'
    )
    user = system.user.get()
    if user:
        header += f'<span class="chip">User: {_esc(user)}</span>'
    git = _git_label(system)
    if git:
        header += f'<span class="chip">Git: {_esc(git)}</span>'
    if system.in_container:
        header += '<span class="chip warn">container</span>'
    cards = [
        _render_runtime_card(runtime),
        _render_modules_card(runtime),
        _render_bytecode_card(runtime),
        _render_host_card(system),
        _render_config_files_card(runtime),
        _render_env_card(env, patterns),
    ]
    return _document(title, header, f'<div class="grid">{"".join(cards)}</div>')


# -- Framework page sections --


def _check(check: ConnectivityCheck, ok: str = "● OK", bad: str = "● KO") -> str:
    if not check.configured:
        return '<span class="muted">not configured</span>'
    if check.ok:
        return f'<span class="good">{_esc(ok)}</span>'
    return f'<span class="bad">{_esc(bad)}</span>'


def _render_app_card(facts: FrameworkFacts) -> str:
    drivers = {d.label: d.driver for d in facts.drivers}
    static = (
        '<span class="good">✓</span>'
        if facts.static_present
        else '<span class="warn">missing</span>'
    )
    rows = [
        ("Name", _esc(facts.name or "—")),
        ("URL", _esc(facts.url or "—")),
        ("Session", f"<code>{_esc(drivers.get('session', '—'))}</code>"),
        ("Cache", f"<code>{_esc(drivers.get('cache', '—'))}</code> {_check(facts.cache)}"),
        ("Queue", f"<code>{_esc(drivers.get('queue', '—'))}</code>"),
        ("Mail", f"<code>{_esc(drivers.get('mail', '—'))}</code>"),
        ("Static dir", f"<code>{_esc(facts.static_dir or '—')}</code> {static}"),
    ]
    return _card("Application", _kv(rows))


def _render_db_card(facts: FrameworkFacts) -> str:
    drivers = {d.label: d.driver for d in facts.drivers}
    status = _check(facts.database, "● Connected", "● Failed")
    if facts.database.configured and not facts.database.ok:
        status += f'<div class="muted">{_esc(facts.database.detail)}</div>'
    rows = [
        ("Driver", f"<code>{_esc(drivers.get('database', '—'))}</code>"),
        ("Connection", status),
    ]
    return _card("Database", _kv(rows))


def _render_module_checks_card(facts: FrameworkFacts) -> str:
    pills = "".join(
        f'<span class="pill">{_esc(m.name)} {"✓" if m.importable else "✗"}</span>'
        for m in facts.modules
    )
    return _card("Python modules", f"<div>{pills}</div>")


def _render_packages_card(facts: FrameworkFacts) -> str:
    summary = facts.packages.get()
    if summary is None:
        rows = [("Packages", "—"), ("Sample", '<span class="muted">not available</span>')]
    else:
        sample = "".join(f'<span class="pill">{_esc(p)}</span>' for p in summary.sample)
        rows = [("Packages", _esc(summary.total)), ("Sample", sample or "—")]
    return _card("Installed packages", _kv(rows))


def _render_route_row(route: RouteInfo) -> str:
    return (
        f"<tr>"
        f"<td><code>{_esc(route.method_label)}</code></td>"
        f"<td><code>{_esc(route.path)}</code></td>"
        f"<td>{_esc(route.name or '—')}</td>"
        f'<td class="muted">{_esc(route.handler)}</td>'
        f'<td class="muted">{_esc(", ".join(route.middleware))}</td>'
        f"</tr>"
    )


def _render_routes(routes: tuple[RouteInfo, ...]) -> str:
    rows = "".join(_render_route_row(r) for r in routes)
    return (
        f'<div class="toolbar">'
        f'<input id="search" type="search" placeholder="Filter routes (path, name, handler, middleware)">'
        f'<span class="muted">Total routes: <strong id="count">{len(routes)}</strong></span>'
        f"</div>"
        f'<div class="card"><table id="routes">'
        f"<thead><tr><th>Methods</th><th>Path</th><th>Name</th><th>Handler</th><th>Middleware</th></tr></thead>"
        f"<tbody>{rows}</tbody>"
        f"</table></div>"
    )


def render_framework_page(facts: FrameworkFacts, *, title: str = "Stack Inspector") -> str:
    """Render the host application page, route table included."""
    project = facts.project_path.get("")
    heading = _esc(title)
    if project:
        heading += f' <small class="muted">{_esc(project)}</small>'
    header = (
        f"<h1>{heading}</h1>"
        f'<span class="chip">stackpeek {_esc(facts.version)}</span>'
        f'<span class="chip">Python {_esc(facts.python_version)}</span>'
        f'<span class="chip">Env: {_esc(facts.env)}</span>'
        f'<span class="chip">Debug: {"on" if facts.debug else "off"}</span>'
    )
    if facts.url:
        header += f'<span class="chip">{_esc(facts.url)}</span>'
    cards = [
        _render_app_card(facts),
        _render_db_card(facts),
        _render_module_checks_card(facts),
        _render_packages_card(facts),
    ]
    body = f'<div class="grid">{"".join(cards)}</div>{_render_routes(facts.routes)}'
    return _document(title, header, body, script=_FILTER_JS)
