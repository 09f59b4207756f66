import enum
import typing as t

import attrs


class BlockKind(enum.Enum):
    SYNTAX = "syntax"
    WEIGHTS_STAGE = "weights stage"
    DEPS_STAGE = "deps stage"
    BASE_IMAGE = "base image"
    PREAMBLE = "preamble"
    INIT_PROCESS = "init process"
    PYTHON_INSTALL = "python install"
    SYSTEM_PACKAGES = "apt installs"
    PIP_INSTALL = "pip installs"
    DEPS_COPY = "deps copy"
    RUN_COMMANDS = "run commands"
    SERVER = "server"
    WEIGHTS_COPY = "weights copy"
    SOURCE_COPY = "source copy"


@attrs.frozen
class InstructionBlock:
    kind: BlockKind
    text: str

    @property
    def lines(self) -> t.List[str]:
        return split_nonempty_lines(self.text)

    @property
    def is_empty(self) -> bool:
        return len(self.lines) == 0


@attrs.define
class DockerfilePlan:
    """
    Ordered Dockerfile blocks, serialized only by :meth:`render`.
    Empty blocks are dropped when added.
    """

    blocks: t.List[InstructionBlock] = attrs.field(factory=list)

    def add(self, kind: BlockKind, text: str) -> None:
        block = InstructionBlock(kind=kind, text=text)
        if not block.is_empty:
            self.blocks.append(block)

    def insert_before_first_stage(self, kind: BlockKind, text: str) -> None:
        """Insert a block right before the first block opening a build stage."""
        stage_kinds = (BlockKind.DEPS_STAGE, BlockKind.BASE_IMAGE)
        for i, block in enumerate(self.blocks):
            if block.kind in stage_kinds:
                self.blocks.insert(i, InstructionBlock(kind=kind, text=text))
                return
        self.add(kind, text)

    def kinds(self) -> t.List[BlockKind]:
        return [block.kind for block in self.blocks]

    def find(self, kind: BlockKind) -> t.List[InstructionBlock]:
        return [block for block in self.blocks if block.kind == kind]

    def render(self) -> str:
        return join_without_blank_lines(block.text for block in self.blocks)


def split_nonempty_lines(text: str) -> t.List[str]:
    return [line for line in text.split("\n") if line.strip()]


def join_without_blank_lines(chunks: t.Iterable[str]) -> str:
    lines: t.List[str] = []
    for chunk in chunks:
        lines.extend(split_nonempty_lines(chunk))
    return "\n".join(lines)
