"""Game description handed to agents.

The rules, scoring and tool list live in `pangram/inputs/game_config.yaml`;
this module loads them and renders the system prompt.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "inputs" / "game_config.yaml"

_REQUIRED_KEYS = ("id", "name", "version", "description", "rules", "goal", "scoring", "tools")


@dataclass
class GameTool:
    name: str
    description: str
    parameters: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    returns: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass
class GameConfig:
    id: str
    name: str
    version: str
    description: str
    rules: str
    goal: str
    scoring: str
    tools: List[GameTool]
    metrics: Dict[str, Any] = field(default_factory=dict)
    strategy_tips: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        """Build a config, raising ValueError on missing keys."""
        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise ValueError(f"Game config missing keys: {', '.join(missing)}")

        tools = [
            GameTool(
                name=t["name"],
                description=t.get("description", ""),
                parameters=t.get("parameters") or {},
                returns=t.get("returns") or {},
            )
            for t in data["tools"]
        ]
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            version=str(data["version"]),
            description=str(data["description"]).strip(),
            rules=str(data["rules"]).strip(),
            goal=str(data["goal"]).strip(),
            scoring=str(data["scoring"]).strip(),
            tools=tools,
            metrics=data.get("metrics") or {},
            strategy_tips=list(data.get("strategy_tips") or []),
        )


_CONFIG_CACHE: Dict[str, GameConfig] = {}


def get_game_config(path: Optional[Union[str, Path]] = None) -> GameConfig:
    """Load (and cache) the game configuration."""
    path = Path(path) if path else DEFAULT_CONFIG_PATH
    key = str(path)
    if key not in _CONFIG_CACHE:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        _CONFIG_CACHE[key] = GameConfig.from_dict(data)
        logger.debug(f"Loaded game config from {path}")
    return _CONFIG_CACHE[key]


def _format_fields(fields: Dict[str, Dict[str, Any]]) -> str:
    return "\n".join(
        f"  - {name}: {info.get('type', 'any')} - {info.get('description', '')}"
        for name, info in fields.items()
    )


def generate_system_prompt(config: GameConfig) -> str:
    """Render the game description as a system prompt."""
    tool_docs = []
    for tool in config.tools:
        params = _format_fields(tool.parameters)
        returns = _format_fields(tool.returns)
        params_block = f"Parameters:\n{params}" if params else "No parameters"
        tool_docs.append(f"### {tool.name}\n{tool.description}\n{params_block}\nReturns:\n{returns}")

    sections = [
        f"# {config.name}",
        config.description,
        f"## Rules\n{config.rules}",
        f"## Goal\n{config.goal}",
        f"## Scoring\n{config.scoring}",
        "## Available Tools\n" + "\n\n".join(tool_docs),
    ]
    if config.strategy_tips:
        sections.append("## Strategy Tips\n" + "\n".join(f"- {tip}" for tip in config.strategy_tips))

    return "\n\n".join(sections) + "\n"
