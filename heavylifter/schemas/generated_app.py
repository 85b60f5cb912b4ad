"""
Generated application snapshot returned by the app generator.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GeneratedFile:
    filename: str
    content: str
    path: str  # relative path including the filename, e.g. "web/package.json"

    def to_dict(self) -> dict:
        return {"filename": self.filename, "content": self.content, "path": self.path}

    @classmethod
    def from_dict(cls, data: dict) -> "GeneratedFile":
        return cls(
            filename=str(data["filename"]),
            content=str(data["content"]),
            path=str(data["path"]),
        )


@dataclass(frozen=True)
class GeneratedApp:
    name: str
    platforms: tuple[str, ...]
    build_command: str
    generated_files: tuple[GeneratedFile, ...]
    instructions: str
    assumptions: tuple[str, ...] = field(default_factory=tuple)

    def files_for(self, platform: str) -> list[GeneratedFile]:
        prefix = f"{platform}/"
        return [f for f in self.generated_files if f.path.startswith(prefix)]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "platforms": list(self.platforms),
            "buildCommand": self.build_command,
            "generatedFiles": [f.to_dict() for f in self.generated_files],
            "instructions": self.instructions,
            "assumptions": list(self.assumptions),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GeneratedApp":
        """Rebuild an app sent back by a client. Raises KeyError/TypeError on bad input."""
        return cls(
            name=str(data["name"]),
            platforms=tuple(str(p) for p in data["platforms"]),
            build_command=str(data.get("buildCommand", "")),
            generated_files=tuple(GeneratedFile.from_dict(f) for f in data["generatedFiles"]),
            instructions=str(data.get("instructions", "")),
            assumptions=tuple(str(a) for a in data.get("assumptions", [])),
        )
