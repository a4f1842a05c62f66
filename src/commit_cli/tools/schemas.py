"""Argument structs for each tool, validated before any handler runs."""

from pydantic import BaseModel, ConfigDict, Field


class _ToolArgs(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ReadFileArgs(_ToolArgs):
    file_path: str = Field(description="The path to the file to read (relative to project root)")


class ListDirArgs(_ToolArgs):
    dir_path: str = Field(
        default=".",
        description='The directory path to list (relative to project root). Defaults to "."',
    )


class CommitHistoryArgs(_ToolArgs):
    count: int = Field(default=5, description="Number of recent commits to show (at most 5)")
    include_hashes: bool = Field(
        default=False,
        description="Prefix each subject with its abbreviated commit hash",
    )


class NoArgs(_ToolArgs):
    pass


class FileDiffArgs(_ToolArgs):
    file_path: str = Field(description="Path of a staged file (relative to project root)")
