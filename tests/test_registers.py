import pytest

from yelpanel.registers import (
    READ_FLAG,
    AdvanceRegister,
    Ctrl1Register,
    FaultRegister,
    Mod120Register,
    RegisterBank,
    SpeedRegister,
)


def _readback(bank, frames):
    for frame in frames:
        bank.apply_readback(frame[0], (frame[1] << 8) | frame[2])


def test_defaults_hold_source_values():
    bank = RegisterBank.defaults()
    assert bank.ctrl1.ag_setpt == 0x9
    assert bank.advance.advance == 90
    assert bank.comctrl1.minspd == 0xB4
    assert bank.mod120.mod120 == 0x800
    assert bank.filk1.filk1 == 0x4B0
    assert bank.speed.speed == 0x5DC


def test_fresh_bank_is_zeroed():
    bank = RegisterBank()
    assert all(register.to_word() == 0 for register in bank.registers())
    assert bank != RegisterBank.defaults()


def test_ctrl1_default_frame():
    frames = RegisterBank.defaults().write_frames()
    assert frames[0] == bytes([0x00, 0x95, 0x11])


def test_advance_and_speed_default_frames():
    frames = RegisterBank.defaults().write_frames()
    assert frames[1] == bytes([0x01, 0x00, 90])
    assert frames[-1] == bytes([0x0B, 0x05, 0xDC])


def test_write_frames_order_and_size():
    frames = RegisterBank.defaults().write_frames()
    assert len(frames) == 12
    assert [frame[0] for frame in frames] == list(range(12))
    assert all(len(frame) == 3 for frame in frames)


def test_read_frames():
    frames = RegisterBank.defaults().read_frames()
    assert len(frames) == 12
    assert frames[0] == bytes([0x80, 0x00, 0x00])
    assert frames[-1] == bytes([0x8B, 0x00, 0x00])
    assert all(frame[0] & READ_FLAG for frame in frames)


def test_write_then_readback_round_trip():
    source = RegisterBank.defaults()
    target = RegisterBank()
    _readback(target, source.write_frames())
    assert target == source


def test_round_trip_with_non_default_values():
    source = RegisterBank.defaults()
    source.drive.lrtime = 2
    source.drive.dtime = 5
    source.loopgn.vref_en = 1
    source.compk2.aa_setpt = 0xF
    target = RegisterBank()
    _readback(target, source.write_frames())
    assert target == source


def test_readback_full_word_sets_field_maxima():
    bank = RegisterBank()
    bank.apply_readback(Mod120Register.ADDRESS, 0xFFFF)
    assert bank.mod120.basic == 1
    assert bank.mod120.speedth == 7
    assert bank.mod120.mod120 == 0x0FFF


def test_readback_ignores_reserved_bits():
    bank = RegisterBank()
    bank.apply_readback(AdvanceRegister.ADDRESS, 0xFF00)
    assert bank.advance.advance == 0


def test_readback_unknown_address():
    with pytest.raises(ValueError):
        RegisterBank().apply_readback(0x20, 0)


def test_single_bit_field_does_not_touch_neighbours():
    frame = Ctrl1Register(enpol=1).write_frame()
    decoded = Ctrl1Register()
    decoded.load_word((frame[1] << 8) | frame[2])
    assert decoded == Ctrl1Register(enpol=1)


def test_oversized_field_is_cut_to_width():
    register = Ctrl1Register(retry=3)
    decoded = Ctrl1Register()
    decoded.load_word(register.to_word())
    assert decoded.retry == 1
    assert decoded.brkmod == 0


def test_speed_word_keeps_twelve_bits():
    register = SpeedRegister(speed=0x5DC)
    assert register.to_word() == 0x5DC
    assert register.address == 0x0B


def test_fault_register_decode():
    bank = RegisterBank()
    bank.apply_readback(FaultRegister.ADDRESS, 0x7F)
    assert bank.fault == FaultRegister(1, 1, 1, 1, 1, 1, 1)
    assert bank.fault not in bank.registers()