"""
Almanac Pipeline - Hardware RTL Implementation

Chains one RemapStage per almanac rule set and tracks the lowest location
seen at the end of the chain.

System Architecture:
    seed → [seed-to-soil] → [soil-to-fertilizer] → ... → [humidity-to-location] → location
                                                                                     ↓
                                                                              running minimum

Components:
    1. RemapStage × stages: Parallel slot compare, one cycle per stage
       - Fully pipelined, accepts one seed per cycle
       - Latency equals the stage count

    2. Minimum tracker: Keeps the lowest location seen
       - done asserts once the seed flagged last_in has left the chain

Loading:
    Mapping slots are written through load_stage / load_slot before seeds are
    streamed. clear invalidates every slot and resets the tracker.
"""

from amaranth import *
from rtl.remap_stage import RemapStage


class AlmanacPipeline(Elaboratable):
    """
    Complete system: chained remap stages followed by a minimum tracker.

    Ports:
        Input (slot loading):
            - load_stage: Stage index to write
            - load_slot: Slot index inside the stage
            - load_src / load_dst / load_len: Mapping fields (64-bit)
            - load_valid: Write the slot on this cycle
            - clear: Invalidate all slots, reset minimum and done

        Input (seed stream):
            - seed_in: Seed number (64-bit)
            - valid_in: Seed valid signal
            - last_in: Marks the final seed of the batch

        Output:
            - location_out: Location for the seed streamed `stages` cycles ago
            - valid_out: Location valid signal
            - min_location: Lowest location seen since clear
            - min_valid: At least one location has been seen
            - done: The last seed has been resolved and min_location is final
    """

    def __init__(self, stages=7, max_mappings=8, width=64):
        if stages < 1:
            raise ValueError("AlmanacPipeline needs at least one stage")

        self.stages = stages
        self.max_mappings = max_mappings
        self.width = width

        # Slot loading interface
        self.load_stage = Signal(range(stages))
        self.load_slot = Signal(range(max_mappings))
        self.load_src = Signal(width)
        self.load_dst = Signal(width)
        self.load_len = Signal(width)
        self.load_valid = Signal()
        self.clear = Signal()

        # Seed stream
        self.seed_in = Signal(width)
        self.valid_in = Signal()
        self.last_in = Signal()

        # Output interface
        self.location_out = Signal(width)
        self.valid_out = Signal()
        self.min_location = Signal(width)
        self.min_valid = Signal()
        self.done = Signal()

    def elaborate(self, platform):
        m = Module()

        remap_stages = [
            RemapStage(max_mappings=self.max_mappings, width=self.width)
            for _ in range(self.stages)
        ]

        for index, stage in enumerate(remap_stages):
            m.submodules[f"stage_{index}"] = stage

            # Broadcast load data, decode the stage select
            m.d.comb += [
                stage.load_slot.eq(self.load_slot),
                stage.load_src.eq(self.load_src),
                stage.load_dst.eq(self.load_dst),
                stage.load_len.eq(self.load_len),
                stage.load_valid.eq(self.load_valid & (self.load_stage == index)),
                stage.clear.eq(self.clear),
            ]

        # Chain the stages
        m.d.comb += [
            remap_stages[0].value_in.eq(self.seed_in),
            remap_stages[0].valid_in.eq(self.valid_in),
        ]
        for upstream, downstream in zip(remap_stages, remap_stages[1:]):
            m.d.comb += [
                downstream.value_in.eq(upstream.value_out),
                downstream.valid_in.eq(upstream.valid_out),
            ]

        final = remap_stages[-1]
        m.d.comb += [
            self.location_out.eq(final.value_out),
            self.valid_out.eq(final.valid_out),
        ]

        # Delay line carrying last_in alongside its seed
        last_pipe = [Signal(name=f"last_{i}") for i in range(self.stages)]
        m.d.sync += last_pipe[0].eq(self.valid_in & self.last_in)
        for upstream, downstream in zip(last_pipe, last_pipe[1:]):
            m.d.sync += downstream.eq(upstream)

        # Running minimum
        with m.If(self.clear):
            m.d.sync += [
                self.min_location.eq(0),
                self.min_valid.eq(0),
                self.done.eq(0),
            ]
        with m.Else():
            with m.If(final.valid_out & (~self.min_valid | (final.value_out < self.min_location))):
                m.d.sync += [
                    self.min_location.eq(final.value_out),
                    self.min_valid.eq(1),
                ]
            with m.If(final.valid_out & last_pipe[-1]):
                m.d.sync += self.done.eq(1)

        return m


def build_load_program(pipeline, stages, max_mappings, width=64):
    """
    Translate a software pipeline into slot writes.

    Args:
        pipeline: software_reference.almanac.Pipeline to load
        stages: Stage count of the target hardware
        max_mappings: Slots per stage of the target hardware
        width: Bit width of the slot registers (default: 64)

    Returns:
        list: (stage, slot, source, destination, length) tuples in load order.
              Hardware stages beyond the pipeline length stay empty and act
              as identity.

    Raises:
        ValueError: The pipeline does not fit the hardware
    """
    if len(pipeline) > stages:
        raise ValueError(f"Pipeline has {len(pipeline)} stages, hardware has {stages}")

    program = []
    for stage_index, rule_set in enumerate(pipeline):
        if len(rule_set) > max_mappings:
            raise ValueError(
                f"Stage {stage_index} ({rule_set.title or 'untitled'}) has "
                f"{len(rule_set)} mappings, hardware has {max_mappings} slots"
            )
        for slot, mapping in enumerate(rule_set.mappings):
            fields = (mapping.source_start, mapping.dest_start, mapping.length)
            # Slot registers would silently truncate wider values
            if any(value >> width for value in fields):
                raise ValueError(
                    f"Stage {stage_index} slot {slot}: {mapping} does not fit {width}-bit slots"
                )
            program.append((stage_index, slot, mapping.source_start, mapping.dest_start, mapping.length))

    return program


if __name__ == "__main__":
    import sys
    from amaranth.back import verilog

    output_path = sys.argv[1] if len(sys.argv) > 1 else "almanac_pipeline.v"

    top = AlmanacPipeline(stages=7, max_mappings=48, width=64)
    v = verilog.convert(top, name="top", ports=[
        # Slot loading interface
        top.load_stage, top.load_slot, top.load_src, top.load_dst, top.load_len,
        top.load_valid, top.clear,
        # Seed stream
        top.seed_in, top.valid_in, top.last_in,
        # Output interface
        top.location_out, top.valid_out, top.min_location, top.min_valid, top.done,
    ])

    with open(output_path, "w") as f:
        f.write(v)
    print(f"Generated {output_path}")
