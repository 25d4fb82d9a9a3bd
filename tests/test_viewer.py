from unittest import mock

from memsim.viewer import show_dump, show_swap


@mock.patch("memsim.viewer.subprocess.Popen")
def test_show_dump_runs_hexdump_on_dmp_file(popen):
    result = show_dump("/tmp/dumps/1-x")
    popen.assert_called_once_with(
        ["xterm", "-hold", "-e", "bash", "-c", "hexdump -C /tmp/dumps/1-x.dmp | less"]
    )
    assert result is popen.return_value


@mock.patch("memsim.viewer.subprocess.Popen")
def test_show_swap_runs_hexdump_on_swap_file(popen):
    result = show_swap("/home/utnso/swapfile.bin")
    popen.assert_called_once_with(
        ["xterm", "-hold", "-e", "bash", "-c", "hexdump -C /home/utnso/swapfile.bin | less"]
    )
    assert result is popen.return_value


@mock.patch("memsim.viewer.subprocess.Popen")
def test_path_with_spaces_is_quoted(popen):
    result = show_swap("/tmp/my swap.bin")
    assert result is popen.return_value
    command = popen.call_args.args[0][-1]
    assert command == "hexdump -C '/tmp/my swap.bin' | less"


@mock.patch("memsim.viewer.subprocess.Popen", side_effect=FileNotFoundError("xterm"))
def test_missing_terminal_gives_none(popen):
    assert show_dump("/tmp/x") is None
    assert show_swap("/tmp/x") is None
    assert popen.call_count == 2