# yelpanel

Control-panel logic for a positive airway pressure device, in plain Python
with no dependencies outside the standard library. The serial port the display
hangs on is an object you supply.

## Modules

### `yelpanel.umath`: numeric helpers

- `pressure_to_speed(pressure)` maps a pressure in cmH2O to a blower speed in
  percent. It interpolates linearly over a fixed table and clamps at both ends
  of the table.
- `parse_string(text)` splits a frame such as `"~0,548"` into `(0, "548")`.
- `hex_to_bytes(text)` decodes hex digit pairs. Odd lengths and non-hex
  characters raise `ValueError`.
- `shift_and_insert(values, new_value)` pushes a value onto the front of a
  fixed-size window and returns the item that drops off the end.
- `total(values, kind)` sums values with the accumulator rules of a
  `NumericKind` (`FLOAT`, `DOUBLE`, `UINT16`, `INT16`, `UINT64`, `INT64`).
  Integer kinds wrap on overflow. `FLOAT` rounds to single precision.
- `average(values, kind)` returns the mean under the same rules. Integer kinds
  truncate toward zero.
- `abs_double(x)` returns the absolute value.
- `get_time_seconds()` returns the seconds elapsed on a monotonic clock since
  the module was loaded.

### `yelpanel.nvs`: settings store

`NvsStore(path, namespace)` is a handle on one namespace of a JSON settings
file.

- It holds strings, `int32`, `uint32` and blob values. Blobs are base64 in the
  file.
- Changes are visible through the handle at once. They reach the file only on
  `commit()`, which leaves other namespaces in the file intact.
- `close()`, or leaving a `with` block, drops uncommitted changes.
- Limits: a namespace must be shorter than 32 bytes, a string shorter than
  256 bytes, and a blob at most 1024 bytes.
- Failures raise `NvsError`, whose `code` is one of `INVALID_ARG`,
  `INVALID_STATE`, `INVALID_SIZE` or `NOT_FOUND`.

### `yelpanel.nextion`: Nextion display protocol

- `encode_command(command)` frames a command as `\xff\xff\xff`, then the
  command text, then `\xff\xff\xff`.
- `parse_frame(frame)` turns `~[type]data` into a `NextionEvent` with
  `action_type` and `action_data`. Anything else gives `None`.
- `NextionActionType` names the action codes the display sends.
- `NextionDisplay(port, handler)` wraps a port object that has
  `write(bytes)` and, for listening, `read(size)`.
  - `send_command`, `set_text` and `set_value` send commands to the display.
  - `handle_frame` parses one incoming frame and calls the handler with the
    event.
  - `listen(stop_event)` reads from the port until the `threading.Event` is
    set.

### `yelpanel.registers`: DRV8308 register map

The module has one dataclass per register, from `Ctrl1Register` to
`FaultRegister`, each with its bit fields.

`RegisterBank` holds them all:

- `RegisterBank.defaults()` gives the start-up configuration.
- `write_frames()` and `read_frames()` return the 3-byte SPI frames for every
  writable register, in bus order.
- `apply_readback(address, value)` decodes a 16-bit word read back from the
  chip into the matching register.

## Example

```python
from yelpanel.umath import pressure_to_speed
from yelpanel.nvs import NvsStore
from yelpanel.registers import RegisterBank

print(pressure_to_speed(10))  # 14.4

with NvsStore("settings.json", "settings") as store:
    store.set_int32("counter", 123)
    store.commit()
    print(store.get_int32("counter"))  # 123

bank = RegisterBank.defaults()
print(bank.write_frames()[0].hex())  # 009511
```

## What this package does not do

- It has no SD-card storage.
- It has no screen firmware updater.
- It does not drive the motor. `yelpanel.registers` builds and decodes SPI
  frames, but nothing in the package sends them over a bus or sets GPIO or PWM
  outputs.
- It has no command-line program.

## Running the tests

```
pip install -e .[test]
pytest
```