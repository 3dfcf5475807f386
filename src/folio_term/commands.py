# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Built-in command set and the bootstrap that registers it.

Handlers take (args, ctx) and return lines, blocks or UI_CLEAR; the
portfolio-backed ones are coroutines that go through ctx.portfolio.
Text-only commands (weather, matrix, ascii, ...) come from the
`commands.static` section of the YAML config.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from datetime import datetime
from typing import Any

from .buffer import OutputBlock, info, result
from .config import UI_CLEAR
from .errors import InvalidArguments
from .executor import ExecutionContext
from .interfaces import ConfigModel
from .registry import ArgSpec, CommandDescriptor, CommandRegistry, split_flags
from .utils import format_table, skill_bar

VERSION = "2.0.0"

GROUPS = ["Information", "System", "Navigation", "Fun"]

DEFAULT_THEMES = ["matrix", "cyberpunk", "retro", "minimal"]

NAVIGATION_ROUTES: dict[str, str] = {
    "portfolio": "/portfolio",
    "blog": "/blog",
    "home": "/",
}

JOKES = [
    "Why do programmers prefer dark mode?\nBecause light attracts bugs! 🐛",
    "How many programmers does it take to change a light bulb?\n"
    "None. That's a hardware problem. 💡",
    "Why did the programmer quit their job?\nThey didn't get arrays! 📊",
    "What's a programmer's favorite hangout place?\nFoo Bar! 🍺",
    "Why do Java developers wear glasses?\nBecause they don't C#! 👓",
    "A SQL query goes into a bar, walks up to two tables\n"
    "and asks: 'Can I join you?' 🍻",
]

QUOTES = [
    '"Code is poetry." - Unknown',
    '"First, solve the problem. Then, write the code." - John Johnson',
    '"Experience is the name everyone gives to their mistakes." - Oscar Wilde',
    '"The best error message is the one that never shows up." - Thomas Fuchs',
    '"Simplicity is the ultimate sophistication." - Leonardo da Vinci',
    '"Any fool can write code that a computer can understand. '
    'Good programmers write code that humans can understand." - Martin Fowler',
]

LS_LISTING = [
    "📁 projects/",
    "📁 skills/",
    "📁 experience/",
    "📄 about.txt",
    "📄 contact.txt",
    "📄 resume.pdf",
    "🔗 portfolio -> /portfolio",
    "🔗 blog -> /blog",
]

PROFESSIONAL_PLATFORMS = {"linkedin", "github", "portfolio"}
WRITING_PLATFORMS = {"medium", "dev.to", "blog"}

TOP_PROJECTS = 5


def _title(text: str) -> list[str]:
    return [text, "═" * max(len(text), 12), ""]


def _not_loaded(section: str) -> list[str]:
    return [f"❌ {section} data not loaded. Try running 'reload' command."]


async def _portfolio(ctx: ExecutionContext) -> dict[str, Any]:
    if ctx.portfolio is None:
        raise RuntimeError("no portfolio data source is configured")
    data = await ctx.portfolio.get_visitor_portfolio()
    ctx.cancel.raise_if_requested()
    return data


# ----------------------------
# System
# ----------------------------


def cmd_help(registry: CommandRegistry) -> Callable[[list[str], Any], list[str]]:
    def _help(args: list[str], ctx: ExecutionContext) -> list[str]:
        if args:
            target = registry.resolve(args[0])
            if target is None:
                raise InvalidArguments(f"help: no such command: {args[0]}")
            lines = [f"usage: {target.usage}", "", target.help]
            if target.aliases:
                lines.append(f"aliases: {', '.join(sorted(target.aliases))}")
            return lines

        lines = ["🔧 Available Commands:", "═══════════════════════", ""]
        by_group: dict[str, list[CommandDescriptor]] = {}
        for d in registry:
            by_group.setdefault(d.group, []).append(d)

        order = GROUPS + sorted(g for g in by_group if g not in GROUPS)
        for group in order:
            cmds = by_group.get(group)
            if not cmds:
                continue
            lines.append(f"{group}:")
            for d in cmds:
                label = d.name
                if d.aliases:
                    label += f" ({', '.join(sorted(d.aliases))})"
                lines.append(f"  {label:<20} - {d.help}")
            lines.append("")

        lines.append("💡 Tip: Use ↑/↓ (or swipe) to navigate command history")
        lines.append("💡 Tip: Tab completes command names")
        return lines

    return _help


def cmd_clear(args: list[str], ctx: ExecutionContext) -> object:
    return UI_CLEAR


def cmd_whoami(args: list[str], ctx: ExecutionContext) -> list[str]:
    s = ctx.session
    theme = _current_theme(ctx)
    return [
        f"{s.user}@{s.host}",
        f"Current directory: {s.cwd}",
        f"Session started: {s.started_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Terminal version: {VERSION}",
        "Shell: portfolio-shell",
        f"Theme: {theme}",
    ]


def cmd_date(args: list[str], ctx: ExecutionContext) -> str:
    return datetime.now().strftime("%a %b %d %Y %H:%M:%S")


def cmd_pwd(args: list[str], ctx: ExecutionContext) -> str:
    s = ctx.session
    suffix = "" if s.cwd == "~" else s.cwd
    return f"/home/{s.user}{suffix}"


def cmd_ls(args: list[str], ctx: ExecutionContext) -> list[str]:
    return list(LS_LISTING)


def cmd_history(args: list[str], ctx: ExecutionContext) -> list[str]:
    entries = list(enumerate(ctx.history, start=1))
    if args:
        try:
            n = int(args[0])
        except ValueError:
            raise InvalidArguments(f"history: not a number: {args[0]}") from None
        if n < 1:
            raise InvalidArguments("history: count must be positive")
        entries = entries[-n:]

    if not entries:
        return ["No history yet."]
    return ["📜 Command History:", "═══════════════════"] + [
        f"  {i:>3}  {raw}" for i, raw in entries
    ]


def _themes(ctx: ExecutionContext) -> list[str]:
    themes = getattr(ctx.config, "themes", None) if ctx.config else None
    return list(themes) if themes else list(DEFAULT_THEMES)


def _current_theme(ctx: ExecutionContext) -> str:
    themes = _themes(ctx)
    if ctx.settings is None:
        return themes[0]
    return ctx.settings.get_setting("theme", themes[0])


def cmd_theme(args: list[str], ctx: ExecutionContext) -> str:
    themes = _themes(ctx)
    current = _current_theme(ctx)
    if args:
        wanted = args[0].lower()
        if wanted not in themes:
            raise InvalidArguments(
                f"theme: unknown theme {args[0]}",
                hint=f"available: {', '.join(themes)}",
            )
        nxt = wanted
    else:
        idx = themes.index(current) if current in themes else -1
        nxt = themes[(idx + 1) % len(themes)]

    if ctx.settings is not None:
        ctx.settings.set_setting("theme", nxt)
    return f"🎨 Theme changed to: {nxt}"


def _format_uptime(seconds: int) -> str:
    mins, secs = divmod(max(0, seconds), 60)
    hours, mins = divmod(mins, 60)
    if hours:
        return f"{hours}h {mins}m {secs}s"
    return f"{mins}m {secs}s"


def cmd_status(args: list[str], ctx: ExecutionContext) -> list[str]:
    s = ctx.session
    uptime = int((datetime.now() - s.started_at).total_seconds())
    loaded = getattr(ctx.portfolio, "loaded", None)
    if ctx.portfolio is None:
        data_state = "🔴 Not configured"
    elif loaded:
        data_state = "🟢 Loaded"
    else:
        data_state = "🟡 Not loaded yet"

    return _title("📊 System Status") + [
        "🟢 Terminal Status: Online",
        f"📡 Portfolio Data: {data_state}",
        f"⏱️  Uptime: {_format_uptime(uptime)}",
        f"🎨 Current Theme: {_current_theme(ctx)}",
        "",
        "📈 Performance:",
        f"  • Commands Executed: {s.commands_executed}",
        f"  • History Entries: {len(ctx.history)}",
        f"  • Buffered Blocks: {s.buffered_blocks}",
    ]


def cmd_echo(args: list[str], ctx: ExecutionContext) -> str:
    return " ".join(args)


# ----------------------------
# Information (portfolio-backed)
# ----------------------------


async def cmd_about(args: list[str], ctx: ExecutionContext) -> list[str]:
    data = await _portfolio(ctx)
    personal = data.get("personal_info")
    if not personal:
        return _not_loaded("Portfolio")

    lines = _title(f"👨‍💻 About {personal.get('name', 'Developer')}")
    lines += [
        personal.get("bio", "Full-Stack Developer."),
        "",
        f"📍 Location: {personal.get('location', 'Not specified')}",
        f"💼 Title: {personal.get('title', 'Full-Stack Developer')}",
        f"📧 Email: {personal.get('email', 'Not specified')}",
    ]
    skills = data.get("skills") or []
    if skills:
        lines += ["", "🎯 Core Technologies:"]
        for skill in skills[:8]:
            lines.append(
                f"  • {skill.get('name', '?')} - "
                f"{skill.get('level', 0)}% proficiency"
            )
    return lines


async def cmd_skills(args: list[str], ctx: ExecutionContext) -> list[str]:
    data = await _portfolio(ctx)
    skills = data.get("skills")
    if not skills:
        return _not_loaded("Skills")

    categories: dict[str, list[dict[str, Any]]] = {}
    for skill in skills:
        categories.setdefault(skill.get("category") or "Other", []).append(skill)

    lines = _title("🛠️ Technical Skills Matrix")
    for category, items in categories.items():
        lines.append(f"{category}:")
        for skill in items:
            level = skill.get("level", 0)
            lines.append(
                f"  {skill_bar(level)} {skill.get('name', '?')} ({level}%)"
            )
        lines.append("")
    lines += [
        "🏆 Expertise Level:",
        "  • Expert (90-100%): Advanced proficiency",
        "  • Advanced (75-89%): Strong working knowledge",
        "  • Intermediate (60-74%): Comfortable usage",
        "  • Beginner (40-59%): Basic understanding",
    ]
    return lines


async def cmd_projects(args: list[str], ctx: ExecutionContext) -> list[str]:
    flags, _ = split_flags(args)
    data = await _portfolio(ctx)
    projects = data.get("projects")
    if not projects:
        return _not_loaded("Projects")

    shown = projects if "--all" in flags else projects[:TOP_PROJECTS]
    lines = _title("🚀 Featured Projects")
    for i, project in enumerate(shown, start=1):
        tech = ", ".join(project.get("technologies") or []) or "Not specified"
        lines.append(f"{i}. {project.get('emoji', '🛠️')} {project.get('title', '?')}")
        lines.append(f"   ├─ {project.get('description', '')}")
        lines.append(f"   ├─ Status: {project.get('status', 'Active')}")
        lines.append(f"   ├─ Tech: {tech}")
        if project.get("live_url"):
            lines.append(f"   ├─ Live: {project['live_url']}")
        if project.get("github_url"):
            lines.append(f"   └─ GitHub: {project['github_url']}")
        else:
            lines.append("   └─ Code: Private repository")
        lines.append("")

    if len(shown) < len(projects):
        lines.append(
            f"📝 Showing top {len(shown)} of {len(projects)} projects "
            f"(projects --all for everything)"
        )
    lines.append("💡 Type 'portfolio' to see all projects in visual mode!")
    return lines


async def cmd_experience(args: list[str], ctx: ExecutionContext) -> list[str]:
    data = await _portfolio(ctx)
    jobs = data.get("experience")
    if not jobs:
        return _not_loaded("Experience")

    lines = _title("💼 Professional Experience")
    for job in jobs:
        lines.append(
            f"🏢 {job.get('title', '?')} @ {job.get('company', '?')} "
            f"({job.get('period', '')})"
        )
        items = list(job.get("highlights") or [])
        if job.get("technologies"):
            items.append("Technologies: " + ", ".join(job["technologies"]))
        for j, item in enumerate(items):
            branch = "└─" if j == len(items) - 1 else "├─"
            lines.append(f"   {branch} {item}")
        lines.append("")

    education = data.get("education") or []
    if education:
        lines.append("🎓 Education:")
        for edu in education:
            lines.append(
                f"   • {edu.get('degree', '?')} - "
                f"{edu.get('school', '?')} ({edu.get('year', '')})"
            )
    return lines


def _link_line(link: dict[str, Any], icon: str = "🔗") -> str:
    return f"  {link.get('icon') or icon} {link.get('platform', '?')}: {link.get('url', '')}"


async def cmd_contact(args: list[str], ctx: ExecutionContext) -> list[str]:
    data = await _portfolio(ctx)
    personal = data.get("personal_info")
    if not personal:
        return _not_loaded("Contact")

    lines = _title("📧 Contact Information")
    lines += [
        "📬 Primary Contact:",
        f"  ✉️  Email: {personal.get('email', 'Not specified')}",
        f"  📱 Phone: {personal.get('phone', 'Not specified')}",
        f"  📍 Location: {personal.get('location', 'Not specified')}",
    ]
    links = data.get("social_links") or []
    if links:
        lines += ["", "🔗 Professional Networks:"]
        lines += [_link_line(link) for link in links]
    lines += ["", "💡 Feel free to reach out for opportunities or collaborations!"]
    return lines


async def cmd_social(args: list[str], ctx: ExecutionContext) -> list[str]:
    data = await _portfolio(ctx)
    links = data.get("social_links")
    if not links:
        return _not_loaded("Social links")

    def platform(link: dict[str, Any]) -> str:
        return str(link.get("platform", "")).lower()

    professional = [x for x in links if platform(x) in PROFESSIONAL_PLATFORMS]
    writing = [x for x in links if platform(x) in WRITING_PLATFORMS]
    other = [
        x for x in links
        if platform(x) not in PROFESSIONAL_PLATFORMS | WRITING_PLATFORMS
    ]

    lines = _title("🔗 Social Media & Professional Links")
    for heading, group, icon in (
        ("💼 Professional:", professional, "🔗"),
        ("📝 Content & Writing:", writing, "📝"),
        ("🎮 Social:", other, "🔗"),
    ):
        if group:
            lines.append(heading)
            lines += [_link_line(link, icon) for link in group]
            lines.append("")
    lines.append("🤝 Let's connect and build something amazing together!")
    return lines


async def cmd_resume(args: list[str], ctx: ExecutionContext) -> list[str]:
    data = await _portfolio(ctx)
    resume = data.get("resume")
    if not resume:
        return _not_loaded("Resume")

    lines = _title("📄 Resume Download")
    links = resume.get("links") or []
    if links:
        lines += ["🔗 Download links:"]
        lines += format_table(
            ["Format", "URL"],
            [[link.get("label", "?"), link.get("url", "")] for link in links],
        )
        lines.append("")
    highlights = resume.get("highlights") or []
    if highlights:
        lines.append("📋 Resume highlights:")
        lines += [f"  • {h}" for h in highlights]
        lines.append("")
    lines.append("💡 Tip: Type 'experience' for detailed work history")
    return lines


async def cmd_reload(args: list[str], ctx: ExecutionContext) -> list[OutputBlock]:
    if ctx.portfolio is None:
        raise RuntimeError("no portfolio data source is configured")
    ctx.portfolio.invalidate()
    data = await _portfolio(ctx)
    sections = [k for k, v in data.items() if v]
    return [
        info("🔄 Reloading portfolio data from backend..."),
        result(f"✅ Portfolio data loaded: {len(sections)} sections"),
    ]


# ----------------------------
# Navigation
# ----------------------------


def cmd_navigate(path: str) -> Callable[[list[str], Any], OutputBlock]:
    def _go(args: list[str], ctx: ExecutionContext) -> OutputBlock:
        if ctx.navigate is not None:
            ctx.navigate(path)
        return info(f"🚀 Navigating to {path}")

    return _go


# ----------------------------
# Fun
# ----------------------------


def cmd_joke(args: list[str], ctx: ExecutionContext) -> list[str]:
    return ("😄 " + random.choice(JOKES)).split("\n")


def cmd_quote(args: list[str], ctx: ExecutionContext) -> str:
    return "💭 " + random.choice(QUOTES)


def cowsay(message: str) -> list[str]:
    width = len(message)
    return [
        " " + "_" * (width + 2),
        f"< {message} >",
        " " + "-" * (width + 2),
        "        \\   ^__^",
        "         \\  (oo)\\_______",
        "            (__)\\       )\\/\\",
        "                ||----w |",
        "                ||     ||",
    ]


def cmd_cowsay(args: list[str], ctx: ExecutionContext) -> list[str]:
    message = " ".join(args) or "Moo! Welcome to my portfolio!"
    return cowsay(message)


def static_text(lines: list[str]) -> Callable[[list[str], Any], list[str]]:
    frozen = [str(s) for s in lines]

    def _text(args: list[str], ctx: ExecutionContext) -> list[str]:
        return list(frozen)

    return _text


# ----------------------------
# Bootstrap
# ----------------------------


def _none(usage: str) -> ArgSpec:
    return ArgSpec(max_args=0, usage=usage)


def register_builtin_commands(
    registry: CommandRegistry, config: ConfigModel | None = None
) -> CommandRegistry:
    """Register every built-in command, then the YAML text commands.

    Raises DuplicateCommandError on any name/alias collision; that is a
    wiring bug and should stop startup.
    """
    builtins = [
        # Information
        CommandDescriptor("about", cmd_about, "About me and my background",
                          arg_spec=_none("about"), group="Information"),
        CommandDescriptor("skills", cmd_skills, "Technical skills and expertise",
                          arg_spec=_none("skills"), group="Information"),
        CommandDescriptor("projects", cmd_projects, "View my featured projects",
                          arg_spec=ArgSpec(max_args=0, flags=frozenset({"--all"}),
                                           usage="projects [--all]"),
                          group="Information"),
        CommandDescriptor("experience", cmd_experience, "Work experience",
                          aliases=frozenset({"exp"}),
                          arg_spec=_none("experience"), group="Information"),
        CommandDescriptor("contact", cmd_contact, "Contact information",
                          arg_spec=_none("contact"), group="Information"),
        CommandDescriptor("social", cmd_social, "Social media links",
                          arg_spec=_none("social"), group="Information"),
        CommandDescriptor("resume", cmd_resume, "Download resume",
                          aliases=frozenset({"cv"}),
                          arg_spec=_none("resume"), group="Information"),
        # System
        CommandDescriptor("help", cmd_help(registry), "Show available commands",
                          aliases=frozenset({"?", "man"}),
                          arg_spec=ArgSpec(max_args=1, usage="help [command]")),
        CommandDescriptor("clear", cmd_clear, "Clear terminal screen",
                          aliases=frozenset({"cls"}), arg_spec=_none("clear")),
        CommandDescriptor("whoami", cmd_whoami, "Display current user info",
                          arg_spec=_none("whoami")),
        CommandDescriptor("date", cmd_date, "Show current date and time",
                          arg_spec=_none("date")),
        CommandDescriptor("history", cmd_history, "Show command history",
                          arg_spec=ArgSpec(max_args=1, usage="history [n]")),
        CommandDescriptor("theme", cmd_theme, "Change terminal theme",
                          arg_spec=ArgSpec(max_args=1, usage="theme [name]")),
        CommandDescriptor("pwd", cmd_pwd, "Print working directory",
                          arg_spec=_none("pwd")),
        CommandDescriptor("ls", cmd_ls, "List directory contents",
                          aliases=frozenset({"dir"}), arg_spec=_none("ls")),
        CommandDescriptor("status", cmd_status, "System and connection status",
                          arg_spec=_none("status")),
        CommandDescriptor("reload", cmd_reload, "Reload portfolio data from backend",
                          arg_spec=_none("reload")),
        CommandDescriptor("echo", cmd_echo, "Print the given text",
                          arg_spec=ArgSpec(max_args=None, free_text=True,
                                           usage="echo [text...]")),
        # Fun
        CommandDescriptor("joke", cmd_joke, "Random programming joke",
                          arg_spec=_none("joke"), group="Fun"),
        CommandDescriptor("quote", cmd_quote, "Inspirational quote",
                          arg_spec=_none("quote"), group="Fun"),
        CommandDescriptor("cowsay", cmd_cowsay, "Make the cow say something",
                          arg_spec=ArgSpec(max_args=None, free_text=True,
                                           usage="cowsay [message...]"),
                          group="Fun"),
    ]
    for name, path in NAVIGATION_ROUTES.items():
        builtins.append(
            CommandDescriptor(name, cmd_navigate(path),
                              f"Switch to {path}", arg_spec=_none(name),
                              group="Navigation")
        )

    for descriptor in builtins:
        registry.register(descriptor)

    static = {}
    if config is not None:
        commands_cfg = config.commands
        static = commands_cfg.get("static", {}) if isinstance(commands_cfg, dict) else {}
    if isinstance(static, dict):
        for name, spec in static.items():
            if not isinstance(spec, dict):
                continue
            registry.register(
                CommandDescriptor(
                    str(name),
                    static_text(list(spec.get("lines") or [])),
                    str(spec.get("help", "")),
                    aliases=frozenset(str(a) for a in spec.get("aliases") or []),
                    arg_spec=_none(str(name)),
                    group=str(spec.get("group", "Fun")),
                )
            )

    return registry
