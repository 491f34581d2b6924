"""Build triggers: start a build for a pull request and describe it."""

from prwatch.builds.base import BuildTrigger, build_message
from prwatch.builds.command import CommandBuildTrigger
from prwatch.builds.stub import StubBuildTrigger

__all__ = ["BuildTrigger", "CommandBuildTrigger", "StubBuildTrigger", "build_message", "make_build_trigger"]


def make_build_trigger(config, repository: str) -> BuildTrigger:
    """Command trigger when build.command is configured, stub otherwise."""
    command = getattr(config.build, "command", None)
    if command:
        return CommandBuildTrigger(
            repository,
            command=list(command),
            working_directory=getattr(config.build, "working_directory", "."),
        )
    return StubBuildTrigger(repository)
