from rogue._internal.dockerfile.instructions import (
    BlockKind,
    DockerfilePlan,
    join_without_blank_lines,
    split_nonempty_lines,
)


def test_empty_blocks_are_dropped():
    plan = DockerfilePlan()
    plan.add(BlockKind.SYNTAX, "#syntax=docker/dockerfile:1.4")
    plan.add(BlockKind.SYSTEM_PACKAGES, "")
    plan.add(BlockKind.PIP_INSTALL, "  \n\t\n")
    plan.add(BlockKind.BASE_IMAGE, "FROM python:3.11-slim")

    assert plan.kinds() == [BlockKind.SYNTAX, BlockKind.BASE_IMAGE]
    assert plan.render() == "#syntax=docker/dockerfile:1.4\nFROM python:3.11-slim"


def test_render_drops_blank_lines():
    plan = DockerfilePlan()
    plan.add(BlockKind.BASE_IMAGE, "\nFROM python:3.11-slim\n\n")
    plan.add(BlockKind.RUN_COMMANDS, "RUN echo a\n   \nRUN echo b\n")
    assert plan.render() == "FROM python:3.11-slim\nRUN echo a\nRUN echo b"


def test_insert_before_first_stage():
    plan = DockerfilePlan()
    plan.add(BlockKind.SYNTAX, "#syntax=docker/dockerfile:1.4")
    plan.add(BlockKind.DEPS_STAGE, "FROM python:3.11 as deps")
    plan.add(BlockKind.BASE_IMAGE, "FROM python:3.11-slim")
    plan.insert_before_first_stage(BlockKind.WEIGHTS_STAGE, "FROM model-weights AS weights")

    assert plan.kinds() == [
        BlockKind.SYNTAX,
        BlockKind.WEIGHTS_STAGE,
        BlockKind.DEPS_STAGE,
        BlockKind.BASE_IMAGE,
    ]
    assert [b.text for b in plan.find(BlockKind.WEIGHTS_STAGE)] == [
        "FROM model-weights AS weights"
    ]


def test_insert_before_first_stage_without_stage():
    plan = DockerfilePlan()
    plan.add(BlockKind.SYNTAX, "#syntax=docker/dockerfile:1.4")
    plan.insert_before_first_stage(BlockKind.WEIGHTS_STAGE, "FROM model-weights AS weights")
    assert plan.kinds() == [BlockKind.SYNTAX, BlockKind.WEIGHTS_STAGE]


def test_normalization_is_idempotent():
    text = "\n\nFROM a\n  \nRUN b \\\n\tc\n\n\nCMD d\n"
    once = join_without_blank_lines([text])
    assert once == "FROM a\nRUN b \\\n\tc\nCMD d"
    assert join_without_blank_lines([once]) == once
    assert split_nonempty_lines(once) == once.split("\n")
