import os

import pytest

from memsim.config import MemoryConfig
from memsim.manager import MemoryManager, ProcessError, load_instructions
from memsim.models import Instruction
from memsim.pagetable import PageTableError
from memsim.usermemory import MemoryAccessError


@pytest.fixture
def config(tmp_path):
    return MemoryConfig(
        memory_size=64,
        page_size=16,
        entries_per_page=2,
        number_of_levels=2,
        swap_path=str(tmp_path / "swap.bin"),
        scripts_path="/scripts/",
    )


@pytest.fixture
def manager(config):
    return MemoryManager(config)


SCRIPT = (Instruction("NOOP"), Instruction("WRITE", ("0", "hola")), Instruction("EXIT"))


def test_load_instructions_skips_blank_lines(tmp_path):
    script = tmp_path / "proc"
    script.write_text("NOOP\n\nWRITE 0 hola\n   EXIT   \n", encoding="utf-8")
    assert load_instructions(str(script)) == list(SCRIPT)


def test_load_instructions_missing_file(tmp_path):
    with pytest.raises(ProcessError):
        load_instructions(str(tmp_path / "missing"))


def test_create_process_reserves_frames(manager, config):
    process = manager.create_process(1, 20, SCRIPT, "p1")
    assert manager.frames_of(1) == [0, 1]
    assert manager.free_bytes() == config.memory_size - 2 * config.page_size
    assert process.path == "/scripts/p1"
    assert manager.find_process(1) is process


def test_create_duplicate_pid_fails(manager):
    manager.create_process(1, 16, SCRIPT, "p1")
    with pytest.raises(ProcessError):
        manager.create_process(1, 16, SCRIPT, "p1")


def test_create_without_space_fails(manager, config):
    with pytest.raises(MemoryAccessError):
        manager.create_process(1, config.memory_size + 1, SCRIPT, "p1")


def test_fetch_instruction_counts_requests(manager):
    manager.create_process(1, 16, SCRIPT, "p1")
    assert manager.fetch_instruction(1, 1) == SCRIPT[1]
    assert manager.find_process(1).metrics.instructions_requested == 1


def test_fetch_instruction_errors(manager):
    manager.create_process(1, 16, SCRIPT, "p1")
    with pytest.raises(ProcessError):
        manager.fetch_instruction(1, len(SCRIPT))
    with pytest.raises(ProcessError):
        manager.fetch_instruction(9, 0)


def test_write_then_read(manager):
    manager.create_process(1, 32, SCRIPT, "p1")
    manager.write(1, 3, b"hola")
    assert manager.read(1, 3, 4) == b"hola"
    metrics = manager.find_process(1).metrics
    assert (metrics.memory_reads, metrics.memory_writes) == (1, 1)


def test_read_out_of_range(manager, config):
    with pytest.raises(MemoryAccessError):
        manager.read(1, config.memory_size, 1)


def test_page_returns_page_size_bytes(manager, config):
    manager.create_process(1, 16, SCRIPT, "p1")
    manager.write(1, 0, b"abc")
    page = manager.page(0)
    assert len(page) == config.page_size
    assert page.startswith(b"abc")


def test_frame_for_walks_table(manager, config):
    manager.create_process(1, 48, SCRIPT, "p1")
    frames = manager.frames_of(1)
    assert manager.frame_for(1, [0, 0]) == frames[0]
    assert manager.frame_for(1, [0, 1]) == frames[1]
    assert manager.frame_for(1, [1, 0]) == frames[2]
    assert manager.find_process(1).metrics.table_accesses == 3 * config.number_of_levels


def test_frame_for_errors(manager):
    manager.create_process(1, 16, SCRIPT, "p1")
    with pytest.raises(PageTableError):
        manager.frame_for(1, [0])
    with pytest.raises(ProcessError):
        manager.frame_for(7, [0, 0])


def test_finalize_frees_everything(manager, config):
    manager.create_process(1, 32, SCRIPT, "p1")
    process = manager.finalize(1)
    assert process.pid == 1
    assert manager.frames_of(1) == []
    assert manager.free_bytes() == config.memory_size
    with pytest.raises(ProcessError):
        manager.find_process(1)


def test_finalize_unknown_returns_none(manager):
    assert manager.finalize(42) is None


def test_suspend_frees_frames(manager, config):
    manager.create_process(1, 32, SCRIPT, "p1")
    manager.suspend(1)
    process = manager.find_process(1)
    assert process.in_swap is True
    assert process.metrics.swap_outs == 1
    assert manager.frames_of(1) == []
    assert os.path.exists(config.swap_path)


def test_suspend_unknown_fails(manager):
    with pytest.raises(ProcessError):
        manager.suspend(3)


def test_suspend_resume_round_trip(manager, config):
    manager.create_process(1, 32, SCRIPT, "p1")
    manager.write(1, 0, b"first")
    manager.write(1, config.page_size, b"second")
    manager.suspend(1)
    manager.create_process(2, 16, SCRIPT, "p2")
    manager.resume(1)
    frames = manager.frames_of(1)
    assert len(frames) == 2
    assert manager.read(1, frames[0] * config.page_size, 5) == b"first"
    assert manager.read(1, frames[1] * config.page_size, 6) == b"second"
    process = manager.find_process(1)
    assert process.in_swap is False
    assert process.metrics.swap_ins == 1
    assert manager.frame_for(1, [0, 1]) == frames[1]


def test_second_suspension_restores_latest_data(manager, config):
    manager.create_process(1, 16, SCRIPT, "p1")
    manager.write(1, 0, b"old")
    manager.suspend(1)
    manager.resume(1)
    frame = manager.frames_of(1)[0]
    manager.write(1, frame * config.page_size, b"new")
    manager.suspend(1)
    manager.resume(1)
    frame = manager.frames_of(1)[0]
    assert manager.read(1, frame * config.page_size, 3) == b"new"


def test_request_resume_without_space(manager, config):
    manager.create_process(1, 48, SCRIPT, "p1")
    manager.suspend(1)
    manager.create_process(2, 32, SCRIPT, "p2")
    with pytest.raises(ProcessError):
        manager.request_resume(1)
    assert manager.find_process(1).in_swap is True


def test_request_resume_with_space(manager):
    manager.create_process(1, 16, SCRIPT, "p1")
    manager.write(1, 0, b"xy")
    manager.suspend(1)
    manager.request_resume(1)
    assert manager.find_process(1).in_swap is False
    assert len(manager.frames_of(1)) == 1


def test_clear_swap(manager):
    manager.create_process(1, 16, SCRIPT, "p1")
    manager.suspend(1)
    assert manager.clear_swap() is True
    assert manager.clear_swap() is False