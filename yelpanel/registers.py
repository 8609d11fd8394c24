"""Register map of the DRV8308 motor controller and its 3-byte SPI frames."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import ClassVar

__all__ = [
    "WRITE_FLAG",
    "READ_FLAG",
    "FRAME_SIZE",
    "READ_SIZE",
    "Ctrl1Register",
    "AdvanceRegister",
    "ComCtrl1Register",
    "Mod120Register",
    "DriveRegister",
    "SpdGainRegister",
    "Filk1Register",
    "Filk2Register",
    "CompK1Register",
    "CompK2Register",
    "LoopGnRegister",
    "SpeedRegister",
    "FaultRegister",
    "RegisterBank",
]

WRITE_FLAG = 0x00
READ_FLAG = 0x80
FRAME_SIZE = 3
READ_SIZE = 2


class _Register:
    """Common behaviour: a 16-bit data word split into named bit fields."""

    ADDRESS: ClassVar[int]
    # (field name, lowest bit in the data word, width in bits)
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]]

    @property
    def address(self) -> int:
        return self.ADDRESS

    def to_word(self) -> int:
        """Pack the fields into the 16-bit data word; each field is cut to its width."""
        word = 0
        for name, shift, width in self.LAYOUT:
            word |= (getattr(self, name) & ((1 << width) - 1)) << shift
        return word & 0xFFFF

    def load_word(self, word: int) -> None:
        """Set every field from a 16-bit data word read back from the device."""
        for name, shift, width in self.LAYOUT:
            setattr(self, name, (word >> shift) & ((1 << width) - 1))

    def write_frame(self) -> bytes:
        word = self.to_word()
        return bytes((WRITE_FLAG | self.ADDRESS, word >> 8, word & 0xFF))

    @classmethod
    def read_frame(cls) -> bytes:
        return bytes((READ_FLAG | cls.ADDRESS, 0x00, 0x00))


@dataclass
class Ctrl1Register(_Register):
    ADDRESS: ClassVar[int] = 0x00
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("ag_setpt", 12, 4),
        ("enpol", 11, 1),
        ("dirpol", 10, 1),
        ("brkpol", 9, 1),
        ("synrect", 8, 1),
        ("pwmf", 6, 2),
        ("spdmode", 4, 2),
        ("fgsel", 2, 2),
        ("brkmod", 1, 1),
        ("retry", 0, 1),
    )
    ag_setpt: int = 0
    enpol: int = 0
    dirpol: int = 0
    brkpol: int = 0
    synrect: int = 0
    pwmf: int = 0
    spdmode: int = 0
    fgsel: int = 0
    brkmod: int = 0
    retry: int = 0


@dataclass
class AdvanceRegister(_Register):
    ADDRESS: ClassVar[int] = 0x01
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (("advance", 0, 8),)
    advance: int = 0


@dataclass
class ComCtrl1Register(_Register):
    ADDRESS: ClassVar[int] = 0x02
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("spdrevs", 8, 8),
        ("minspd", 0, 8),
    )
    spdrevs: int = 0
    minspd: int = 0


@dataclass
class Mod120Register(_Register):
    ADDRESS: ClassVar[int] = 0x03
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("basic", 15, 1),
        ("speedth", 12, 3),
        ("mod120", 0, 12),
    )
    basic: int = 0
    speedth: int = 0
    mod120: int = 0


@dataclass
class DriveRegister(_Register):
    ADDRESS: ClassVar[int] = 0x04
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("lrtime", 14, 2),
        ("hallrst", 12, 2),
        ("delay", 11, 1),
        ("autoadv", 10, 1),
        ("autogn", 9, 1),
        ("ensine", 8, 1),
        ("tdrive", 6, 2),
        ("dtime", 3, 3),
        ("idrive", 0, 3),
    )
    lrtime: int = 0
    hallrst: int = 0
    delay: int = 0
    autoadv: int = 0
    autogn: int = 0
    ensine: int = 0
    tdrive: int = 0
    dtime: int = 0
    idrive: int = 0


@dataclass
class SpdGainRegister(_Register):
    ADDRESS: ClassVar[int] = 0x05
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("intclk", 12, 3),
        ("spdgain", 0, 12),
    )
    intclk: int = 0
    spdgain: int = 0


@dataclass
class Filk1Register(_Register):
    ADDRESS: ClassVar[int] = 0x06
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("hallpol", 15, 1),
        ("bypfilt", 12, 1),
        ("filk1", 0, 12),
    )
    hallpol: int = 0
    bypfilt: int = 0
    filk1: int = 0


@dataclass
class Filk2Register(_Register):
    ADDRESS: ClassVar[int] = 0x07
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (("filk2", 0, 12),)
    filk2: int = 0


@dataclass
class CompK1Register(_Register):
    ADDRESS: ClassVar[int] = 0x08
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("bypcomp", 12, 1),
        ("compk1", 0, 12),
    )
    bypcomp: int = 0
    compk1: int = 0


@dataclass
class CompK2Register(_Register):
    ADDRESS: ClassVar[int] = 0x09
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("aa_setpt", 12, 4),
        ("compk2", 0, 12),
    )
    aa_setpt: int = 0
    compk2: int = 0


@dataclass
class LoopGnRegister(_Register):
    ADDRESS: ClassVar[int] = 0x0A
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("ocpdeg", 14, 2),
        ("ocpth", 12, 2),
        ("ovth", 11, 1),
        ("vref_en", 10, 1),
        ("loopgn", 0, 10),
    )
    ocpdeg: int = 0
    ocpth: int = 0
    ovth: int = 0
    vref_en: int = 0
    loopgn: int = 0


@dataclass
class SpeedRegister(_Register):
    ADDRESS: ClassVar[int] = 0x0B
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (("speed", 0, 12),)
    speed: int = 0


@dataclass
class FaultRegister(_Register):
    ADDRESS: ClassVar[int] = 0x0C
    LAYOUT: ClassVar[tuple[tuple[str, int, int], ...]] = (
        ("rlock", 6, 1),
        ("vmov", 5, 1),
        ("cpfail", 4, 1),
        ("uvlo", 3, 1),
        ("ots", 2, 1),
        ("cpoc", 1, 1),
        ("ocp", 0, 1),
    )
    rlock: int = 0
    vmov: int = 0
    cpfail: int = 0
    uvlo: int = 0
    ots: int = 0
    cpoc: int = 0
    ocp: int = 0


@dataclass
class RegisterBank:
    """Host-side copy of every controller register; all fields start at zero."""

    ctrl1: Ctrl1Register = field(default_factory=Ctrl1Register)
    advance: AdvanceRegister = field(default_factory=AdvanceRegister)
    comctrl1: ComCtrl1Register = field(default_factory=ComCtrl1Register)
    mod120: Mod120Register = field(default_factory=Mod120Register)
    drive: DriveRegister = field(default_factory=DriveRegister)
    spdgain: SpdGainRegister = field(default_factory=SpdGainRegister)
    filk1: Filk1Register = field(default_factory=Filk1Register)
    filk2: Filk2Register = field(default_factory=Filk2Register)
    compk1: CompK1Register = field(default_factory=CompK1Register)
    compk2: CompK2Register = field(default_factory=CompK2Register)
    loopgn: LoopGnRegister = field(default_factory=LoopGnRegister)
    speed: SpeedRegister = field(default_factory=SpeedRegister)
    fault: FaultRegister = field(default_factory=FaultRegister)

    @classmethod
    def defaults(cls) -> "RegisterBank":
        """The configuration loaded into the controller at start-up."""
        return cls(
            ctrl1=Ctrl1Register(
                ag_setpt=0x9, enpol=0x0, dirpol=0x1, brkpol=0x0, synrect=0x1,
                pwmf=0x0, spdmode=0x01, fgsel=0x0, brkmod=0x0, retry=0x1,
            ),
            advance=AdvanceRegister(advance=90),
            comctrl1=ComCtrl1Register(spdrevs=0x03, minspd=0xB4),
            mod120=Mod120Register(basic=0x0, speedth=0x6, mod120=0x800),
            drive=DriveRegister(
                lrtime=0x0, hallrst=0x0, delay=0x0, autoadv=0x0, autogn=0x1,
                ensine=0x0, tdrive=0x1, dtime=0x0, idrive=0x0,
            ),
            spdgain=SpdGainRegister(intclk=0x3, spdgain=0x007),
            filk1=Filk1Register(hallpol=0x01, bypfilt=0x0, filk1=0x4B0),
            filk2=Filk2Register(filk2=0x3B6),
            compk1=CompK1Register(bypcomp=0x0, compk1=0x12C),
            compk2=CompK2Register(aa_setpt=0x0, compk2=0x258),
            loopgn=LoopGnRegister(ocpdeg=0x3, ocpth=0x3, ovth=0x0, vref_en=0x0, loopgn=0x064),
            speed=SpeedRegister(speed=0x5DC),
            fault=FaultRegister(),
        )

    def registers(self) -> tuple[_Register, ...]:
        """The writable registers in bus order (the fault register is excluded)."""
        return tuple(
            getattr(self, f.name) for f in fields(self) if f.name != "fault"
        )

    def write_frames(self) -> list[bytes]:
        """Write frames for every writable register, in bus order."""
        return [register.write_frame() for register in self.registers()]

    def read_frames(self) -> list[bytes]:
        """Read-request frames for every writable register, in bus order."""
        return [register.read_frame() for register in self.registers()]

    def apply_readback(self, address: int, value: int) -> None:
        """Store the data word read back from the register at ``address``."""
        for f in fields(self):
            register = getattr(self, f.name)
            if register.ADDRESS == address:
                register.load_word(value & 0xFFFF)
                return
        raise ValueError(f"no register at address {address:#04x}")