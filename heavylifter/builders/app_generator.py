"""
App Generator

Turns an idea string and a platform selection into a GeneratedApp built
from the fixed templates in templates.py:

1. Name: up to two significant words of the idea, capitalized
2. Code: todo-shaped template if the idea mentions "todo", else a generic list
3. Config: package manifest + platform config per selected platform

Deterministic and total: any input, including an empty idea, yields an app.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Union

from . import templates
from ..schemas.generated_app import GeneratedApp, GeneratedFile

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ("web", "android", "ios")
STOP_WORDS = {"with", "that", "for", "and", "the", "app", "application"}
FALLBACK_NAME = "MyApp"
MIN_NAME_WORD_LENGTH = 4
MAX_NAME_WORDS = 2


@dataclass(frozen=True)
class BuildSystem:
    name: str
    install: str  # dependency install command
    run: str      # script runner prefix
    exec: str     # package binary runner


BUILD_SYSTEMS: dict[str, BuildSystem] = {
    "npm": BuildSystem("npm", install="npm install", run="npm run", exec="npx"),
    "yarn": BuildSystem("yarn", install="yarn install", run="yarn", exec="yarn dlx"),
    "pnpm": BuildSystem("pnpm", install="pnpm install", run="pnpm run", exec="pnpm dlx"),
}
DEFAULT_BUILD_SYSTEM = "npm"

PlatformSelection = Union[Mapping[str, bool], Iterable[str]]


def generate_app_name(idea: str) -> str:
    """
    Derive a PascalCase name from the idea.

    "A simple todo app" -> "SimpleTodo"; nothing significant -> "MyApp".
    """
    words = (idea or "").lower().split(" ")
    name_words = [
        word for word in words
        if len(word) >= MIN_NAME_WORD_LENGTH and word not in STOP_WORDS
    ][:MAX_NAME_WORDS]

    if not name_words:
        return FALLBACK_NAME
    return "".join(word[0].upper() + word[1:] for word in name_words)


def app_slug(name: str) -> str:
    """Lower-case, dash-separated, npm-safe package name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "my-app"


def bundle_identifier(name: str) -> str:
    ident = re.sub(r"[^a-z0-9]", "", name.lower()) or "myapp"
    if ident[0].isdigit():
        ident = f"app{ident}"
    return f"com.heavylifter.{ident}"


def normalize_platforms(platforms: PlatformSelection) -> list[str]:
    """
    Selected platform names in canonical order (web, android, ios).

    Accepts either flags ({"web": True, "ios": False}) or names (["ios", "web"]).
    Unknown names are ignored.
    """
    if isinstance(platforms, Mapping):
        selected = {str(name).lower() for name, enabled in platforms.items() if enabled}
    elif isinstance(platforms, str):
        selected = {platforms.lower()}
    else:
        selected = {str(name).lower() for name in platforms or ()}
    return [p for p in SUPPORTED_PLATFORMS if p in selected]


def get_build_system(name: str | None) -> BuildSystem:
    return BUILD_SYSTEMS.get((name or "").lower(), BUILD_SYSTEMS[DEFAULT_BUILD_SYSTEM])


def component_name(name: str) -> str:
    """A valid JS identifier for the generated root component."""
    ident = re.sub(r"[^A-Za-z0-9_$]", "", name) or FALLBACK_NAME
    if ident[0].isdigit():
        ident = f"App{ident}"
    return ident


def _name_values(name: str, slug: str) -> dict[str, str]:
    return {
        "component_name": component_name(name),
        "app_title": json.dumps(name),
        "json_name": json.dumps(name)[1:-1],
        "app_slug": slug,
    }


def _web_files(idea_lower: str, name: str, slug: str) -> list[GeneratedFile]:
    page = templates.WEB_TODO_PAGE if "todo" in idea_lower else templates.WEB_LIST_PAGE
    values = _name_values(name, slug)
    return [
        GeneratedFile("page.jsx", templates.render(page, **values), "web/app/page.jsx"),
        GeneratedFile("package.json", templates.render(templates.WEB_PACKAGE_JSON, **values), "web/package.json"),
        GeneratedFile("next.config.js", templates.WEB_NEXT_CONFIG, "web/next.config.js"),
    ]


def _mobile_files(idea_lower: str, name: str, slug: str, platform: str) -> list[GeneratedFile]:
    code = templates.MOBILE_TODO_APP if "todo" in idea_lower else templates.MOBILE_LIST_APP
    config = templates.ANDROID_APP_JSON if platform == "android" else templates.IOS_APP_JSON
    values = {
        **_name_values(name, slug),
        "platform": platform,
        "bundle_id": bundle_identifier(name),
    }
    return [
        GeneratedFile("App.js", templates.render(code, **values), f"{platform}/App.js"),
        GeneratedFile("package.json", templates.render(templates.MOBILE_PACKAGE_JSON, **values), f"{platform}/package.json"),
        GeneratedFile("app.json", templates.render(config, **values), f"{platform}/app.json"),
    ]


def _build_command(platform: str, build: BuildSystem) -> str:
    if platform == "web":
        return f"(cd web && {build.install} && {build.run} build)"
    return f"(cd {platform} && {build.install} && {build.exec} expo export --platform {platform})"


def _instructions(platform: str, build: BuildSystem) -> str:
    if platform == "web":
        return templates.render(templates.WEB_INSTRUCTIONS, run=build.run)
    label = "Android" if platform == "android" else "iOS"
    return templates.render(
        templates.MOBILE_INSTRUCTIONS, platform=platform, platform_label=label, exec=build.exec
    )


def generate_app(
    idea: str,
    platforms: PlatformSelection,
    build_system: str | None = DEFAULT_BUILD_SYSTEM,
) -> GeneratedApp:
    """
    Generate scaffold files for every selected platform.

    Args:
        idea: Free-text app idea
        platforms: Platform flags or names; see normalize_platforms()
        build_system: "npm", "yarn" or "pnpm"; anything else means npm

    Returns:
        GeneratedApp with three files per selected platform
    """
    name = generate_app_name(idea)
    slug = app_slug(name)
    idea_lower = (idea or "").lower()
    selected = normalize_platforms(platforms)
    build = get_build_system(build_system)

    files: list[GeneratedFile] = []
    commands: list[str] = []
    instructions: list[str] = []
    for platform in selected:
        if platform == "web":
            files.extend(_web_files(idea_lower, name, slug))
        else:
            files.extend(_mobile_files(idea_lower, name, slug, platform))
        commands.append(_build_command(platform, build))
        instructions.append(_instructions(platform, build))

    logger.info(
        "Generated %s for %s (%d files, %s)",
        name, ", ".join(selected) or "no platforms", len(files), build.name,
    )

    return GeneratedApp(
        name=name,
        platforms=tuple(selected),
        build_command=" && ".join(commands),
        generated_files=tuple(files),
        instructions="\n\n".join(instructions),
        assumptions=templates.ASSUMPTIONS,
    )
