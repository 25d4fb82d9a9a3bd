# memsim

memsim simulates the main-memory module used in an operating-systems exercise.
It manages a block of user memory that is split into page-sized frames. Each
process gets a multilevel page table. Processes can be moved out to a swap
file and brought back, and their frames can be written to dump files. The
module also counts memory accesses for each process. Other modules, such as a
kernel or a CPU, talk to it through a small HTTP interface that uses JSON.

The package needs only the Python standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running the server

```
memsim path/to/memoria.json
```

The command `memsim` calls `memsim.server:main`. It does the following, in order:

1. Reads the configuration file.
2. Opens a log that writes both to standard output and to `memoria.log` in the
   current directory. The file is emptied each time the server starts.
3. Deletes any swap file left from an earlier run.
4. Serves HTTP on every interface, on `port_memory`.

It exits with status 1 in any of these cases:

- the argument is missing;
- the file cannot be read or decoded;
- the log level is not recognised;
- the server cannot bind its port.

The configuration is a JSON object. A key that is missing or `null` keeps a
zero value. Keys are matched exactly first; if no exact match exists, they are
matched without regard to case.

| key                | meaning                                          |
|--------------------|--------------------------------------------------|
| `port_memory`      | port to listen on                                |
| `ip_memory`        | address of this module                           |
| `memory_size`      | bytes of user memory                             |
| `page_size`        | bytes per page and per frame                     |
| `entries_per_page` | entries in each page table                       |
| `number_of_levels` | levels of the page table                         |
| `memory_delay`     | milliseconds to wait before memory requests      |
| `swapfile_path`    | path of the swap file                            |
| `swap_delay`       | milliseconds to wait before swap requests        |
| `log_level`        | `debug`, `info`, `warn`/`warning` or `error`     |
| `dump_path`        | directory where memory dumps are written         |
| `scripts_path`     | prefix stored with each process's script path    |

## HTTP endpoints

Every endpoint accepts any method and reads a JSON body. Replies are JSON,
except for errors, which are plain text. Byte data is sent as base64 strings.
An endpoint that only needs a PID accepts either `{"pid": N}` or a bare number.

| path                    | body                                   | reply |
|-------------------------|----------------------------------------|-------|
| `/recibir-handshake`    | `{"Puerto": p, "IP": "..."}`           | empty; the kernel's address is recorded |
| `/conectarcpumemoria`   | any JSON object                        | `{"Tamaño_pagina", "Cant_entradas", "Numeros_de_nivel"}` |
| `/cargar-proceso`       | `{"PID", "Tamanio", "PATH"}`           | `"OK"`; 500 if the script cannot be read, 409 if the PID exists or memory is full |
| `/obtener-instruccion`  | `{"pid", "pc"}`                        | `{"operacion", "argumentos"}`; 404 if missing |
| `/espacio-libre`        | ignored                                | `{"BytesLibres": n}` |
| `/leer`                 | `{"PID", "DirFisica", "Tamanio"}`      | base64 bytes, or `null` if the address is out of range |
| `/escribir`             | `{"PID", "DirFisica", "Datos"}`        | empty |
| `/pagina`               | a bare integer address                 | base64 of one page, empty if out of range |
| `/solicitud-marco`      | `{"PID", "Indices": [...]}`            | frame number, or `-1` |
| `/suspension-proceso`   | PID                                    | `"OK"`; 409 on failure |
| `/desuspension-proceso` | PID                                    | `"OK"`; 409 if there is not enough space or it fails |
| `/finalizar-proceso`    | PID                                    | `"OK"` |
| `/memory-dump`          | PID                                    | `{"PID", "Respuesta": "OK"}`; 500 on failure |

The `PATH` sent to `/cargar-proceso` is read relative to `../pruebas/`. You can
change this directory with the `scripts_dir` argument of `MemoryService`.

A script has one instruction per line. The operation comes first, followed by
its arguments, separated by whitespace. Blank lines are skipped.

## Library use

```python
from memsim.config import MemoryConfig
from memsim.manager import MemoryManager, load_instructions
from memsim.dump import dump_memory

config = MemoryConfig.from_dict({
    "memory_size": 256, "page_size": 16,
    "entries_per_page": 4, "number_of_levels": 2,
    "swapfile_path": "swap.bin", "dump_path": "dumps",
})
manager = MemoryManager(config)
manager.create_process(1, 40, load_instructions("program.txt"), "program.txt")

address = manager.frame_for(1, [0, 0]) * config.page_size
manager.write(1, address, b"hello")
print(manager.read(1, address, 5))

manager.suspend(1)          # pages go to swap.bin, frames are freed
manager.resume(1)           # pages come back into fresh frames
print(dump_memory(manager, 1, config.dump_path))
manager.finalize(1)         # logs the process metrics and frees everything
```

### Modules

- `memsim.config`: configuration dataclasses.
  - `MemoryConfig`, `CpuConfig`, `IoConfig` and `KernelConfig`, each with a
    `from_dict` constructor.
  - `load_memory_config` and `listen_address`.
  - Raises `ConfigError` when a configuration cannot be read or decoded.
- `memsim.logger`: logging helpers.
  - `parse_level` raises `LogLevelError` for an unknown name.
  - `new_logger` writes both to stdout and to a file.
  - `close_logger` closes the logger's handlers.
- `memsim.models`: the JSON messages, such as `Instruction`, `Handshake`,
  `ProcessRequest`, `WriteRequest` and `ReadRequest`, and the `State` enum.
- `memsim.usermemory`: `UserMemory`.
  - Holds the byte array and records which process owns each frame.
  - Supports reads, writes, reading a page, and taking or releasing frames.
  - Raises `MemoryAccessError` on an access out of range.
- `memsim.pagetable`: page tables.
  - `build_page_table` builds the table tree and `lookup_frame` walks it.
  - Raises `PageTableError` for a bad build or lookup.
- `memsim.metrics`: access counters.
  - `ProcessMetrics` holds the counters for one process and its summary line.
  - `table_accesses` computes the number of table accesses.
- `memsim.swap`: the swap file.
  - `SwapFile` appends and reads the block for each process.
  - `parse_block` decodes one block.
  - Raises `SwapError` when the file cannot be written, read or parsed.
- `memsim.manager`: `MemoryManager` ties memory, page tables, swap and
  processes together. It also provides `load_instructions` and raises
  `ProcessError`.
- `memsim.dump`: `dump_memory` writes every frame of a process, in ascending
  order, to `<pid>-<YYYYmmdd_HHMMSS.mmm>.dmp`. It raises `DumpError` when the
  process has no frames.
- `memsim.server`: the HTTP service.
  - `MemoryService.handle` serves a single request.
  - `make_server` creates the HTTP server.
  - `decode_pid` reads a PID from a request body.
  - `main` starts the server.
- `memsim.client`: helpers that POST JSON to other modules.
  - `send_message`, `send_io_request`, `send_io_finished`, `send_handshake`
    and `send_disconnection`.
  - `check_arguments` raises `ArgumentError` when arguments are missing.
- `memsim.viewer`: `show_dump` and `show_swap` open an `xterm` that runs
  `hexdump -C` on a file. They return `None` if no terminal could be started.

## What this package does not do

memsim is only the memory module. It contains no kernel, no CPU and no I/O
device. `CpuConfig`, `IoConfig`, `KernelConfig` and the `memsim.client` helpers
describe and address those modules, but nothing in this package runs them.
There is no process scheduling, no TLB and no cache. The viewer requires
`xterm`, `bash`, `hexdump` and `less` to be installed.