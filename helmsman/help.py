"""
Helmsman help renderer: usage text for the application and for single commands.

Renderers
- render_main_help(app, node=None): application (or subtree) help with the command
  list, the visible option groups, the quick reference trailer and the package footer.
- render_command_help(app, node, command): help of one leaf command, with
  its own option group first and the common ones after it.

Layout
- Commands are listed in registration order, never sorted, so the application
  controls the presentation priority.
- Options show '-s|--silent' and '--loglevel <level>' forms in an aligned column;
  descriptions wrap with a hanging indent to the console width.
- Hidden switches (help, version, interactive) are not listed in the groups; they
  appear in the trailer as ready-to-type command lines.

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
  Styles only show on color-capable terminals; captured output is plain text.
"""
import textwrap
from collections import defaultdict

from rich.text import Text

_COLUMN = 24

_TRAILER = (
    ("is_help", "", "Quick help"),
    ("is_help", "<command>", "Quick help on command"),
    ("is_version", "", "Show version"),
    ("is_interactive", "", "Enter interactive mode"),
)


def _styles():
    return defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "description": "italic #A3A3A3",
        "group-label": "bold #FFFFFF",
        "switch": "bold #22C55E",
        "command": "bold #00E6FF",
        "footer": "#737373",
    } | getattr(__import__("__main__"), "__styles__", {}))


def _names(spec):
    names = "|".join(spec.aliases)
    if spec.takes_value:
        names += " " + spec.metavar
    return names


def _rows(app, registry, command_word):
    """
    Collect (label, description, style) rows: visible groups first, then the trailer.
    """
    groups = []
    for group, specs in registry.groups().items():
        rows = [(_names(spec), spec.descr or "", "switch") for spec in specs if not spec.hidden]
        if rows:
            groups.append((group, rows))

    trailer = []
    for key, placeholder, descr in _TRAILER:
        spec = registry.find(key)
        if spec is None:
            continue
        words = [app.prog]
        if placeholder:
            words.append(command_word)
        words.append("|".join(spec.aliases))
        trailer.append((" ".join(words), descr, "program-name"))
    return groups, trailer


def _table(text, rows, styles, width, *, indent=2):
    column = max([_COLUMN] + [indent + len(label) + 2 for label, _, _ in rows])
    if column > width // 2:
        column = _COLUMN
    for label, descr, style in rows:
        text.append(" " * indent).append(label, styles[style])
        lines = textwrap.wrap(descr, max(width - column, 20)) or [""]
        if indent + len(label) + 1 > column:
            text.append("\n").append(" " * column)
        else:
            text.append(" " * (column - indent - len(label)))
        text.append(lines[0])
        for line in lines[1:]:
            text.append("\n").append(" " * column).append(line)
        text.append("\n")


def _footer(app, text, styles):
    manifest = app.manifest
    if manifest is None:
        return
    text.append("\n").append(f"{manifest.name}@{manifest.version}", styles["footer"]).append("\n")
    if manifest.homepage:
        text.append(f"Home page: <{manifest.homepage}>", styles["footer"]).append("\n")
    if manifest.bugs:
        text.append(f"Bug reports: <{manifest.bugs}>", styles["footer"]).append("\n")


def _body(app, text, registry, command_word, styles, width):
    groups, trailer = _rows(app, registry, command_word)
    for group, rows in groups:
        text.append("\n").append(group, styles["group-label"]).append(":\n")
        _table(text, rows, styles, width)
    if trailer:
        text.append("\n")
        _table(text, trailer, styles, width, indent=0)


def render_main_help(app, node=None):
    """
    Render the application help, or the help of an inner node of the tree.
    """
    styles = _styles()
    width = app.stdout.width
    node = app.tree.root if node is None else node
    route = " ".join((app.prog, *node.path))
    placeholder = "<subcommand>" if node.path else "<command>"

    text = Text()
    if not node.path and app.manifest is not None and app.manifest.description:
        text.append(app.manifest.description, styles["description"]).append("\n\n")

    text.append("Usage: ", styles["usage-label"]).append(route, styles["program-name"])
    text.append(f" {placeholder} [<options>...] [<args>...]\n")

    if node.children:
        text.append(f"\nwhere {placeholder} is one of:\n")
        names = textwrap.wrap(", ".join(node.children), width - 2, break_on_hyphens=False)
        for line in names:
            text.append("  ").append(line, styles["command"]).append("\n")

    _body(app, text, app.options, " ".join((*node.path, placeholder)), styles, width)
    _footer(app, text, styles)
    text.rstrip()
    return text


def render_command_help(app, node, command):
    """
    Render the help of the leaf `node` bound to `command`.
    """
    styles = _styles()
    width = app.stdout.width
    route = " ".join((app.prog, *node.path))

    text = Text()
    descr = getattr(command, "descr", None)
    if descr:
        text.append(descr, styles["description"]).append("\n\n")

    usage = getattr(command, "usage", None) or "[<options>...] [<args>...]"
    text.append("Usage: ", styles["usage-label"]).append(route, styles["program-name"])
    text.append(f" {usage}\n")

    registry = app.options
    own = getattr(command, "options", None)
    if own is not None and len(own):
        # The command's own switches come first.
        registry = own.merge(app.options)
    _body(app, text, registry, " ".join(node.path), styles, width)
    _footer(app, text, styles)
    text.rstrip()
    return text


__all__ = (
    "render_main_help",
    "render_command_help",
)
