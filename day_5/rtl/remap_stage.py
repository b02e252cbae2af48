"""
Remap Stage Hardware Implementation using Amaranth HDL

One almanac rule set in hardware. Mappings are loaded into a bank of slot
registers; each streamed value is compared against every slot in parallel
and the lowest-numbered matching slot translates it. Values matching no
slot pass through unchanged.

Architecture:
- Load: one (source, destination, length) slot written per cycle
- Compare: parallel range check source <= value < source + length per slot
- Select: priority chain, slot 0 has the highest priority
- Output: registered, one cycle latency
"""

from amaranth import *


class RemapStage(Elaboratable):
    """
    Hardware module that resolves values through one rule set.

    Ports:
        Input (slot loading):
            - load_slot: Slot index to write
            - load_src: Mapping source start (64-bit)
            - load_dst: Mapping destination start (64-bit)
            - load_len: Mapping length (64-bit)
            - load_valid: Write the slot on this cycle
            - clear: Invalidate every slot

        Input (value stream):
            - value_in: Value to translate (64-bit)
            - valid_in: Input data valid signal

        Output:
            - value_out: Translated value (64-bit), one cycle after value_in
            - valid_out: Output data valid signal
    """

    def __init__(self, max_mappings=8, width=64):
        """
        Initialize the Remap Stage module.

        Args:
            max_mappings: Number of mapping slots (default: 8)
            width: Bit width for values (default: 64)
        """
        self.max_mappings = max_mappings
        self.width = width

        # Slot loading interface
        self.load_slot = Signal(range(max_mappings))
        self.load_src = Signal(width)
        self.load_dst = Signal(width)
        self.load_len = Signal(width)
        self.load_valid = Signal()
        self.clear = Signal()

        # Value stream
        self.value_in = Signal(width)
        self.valid_in = Signal()
        self.value_out = Signal(width)
        self.valid_out = Signal()

    def elaborate(self, platform):
        m = Module()

        src = [Signal(self.width, name=f"src_{i}") for i in range(self.max_mappings)]
        dst = [Signal(self.width, name=f"dst_{i}") for i in range(self.max_mappings)]
        length = [Signal(self.width, name=f"len_{i}") for i in range(self.max_mappings)]
        used = [Signal(name=f"used_{i}") for i in range(self.max_mappings)]

        # Slot register writes
        for i in range(self.max_mappings):
            with m.If(self.clear):
                m.d.sync += used[i].eq(0)
            with m.Elif(self.load_valid & (self.load_slot == i)):
                m.d.sync += [
                    src[i].eq(self.load_src),
                    dst[i].eq(self.load_dst),
                    length[i].eq(self.load_len),
                    used[i].eq(self.load_len != 0),
                ]

        # Identity unless a slot matches
        mapped = Signal(self.width)
        m.d.comb += mapped.eq(self.value_in)

        # Later comb assignments win, so walk slots from last to first to give
        # slot 0 the final say
        for i in reversed(range(self.max_mappings)):
            # src + len is width + 1 bits wide, no overflow at the top of the range
            hit = used[i] & (self.value_in >= src[i]) & (self.value_in < src[i] + length[i])
            with m.If(hit):
                m.d.comb += mapped.eq(self.value_in - src[i] + dst[i])

        m.d.sync += [
            self.value_out.eq(mapped),
            self.valid_out.eq(self.valid_in),
        ]

        return m
