"""Decoder: opcode classification, operand fields and disassembly."""
import pytest

from catchip8.decoder import Instruction, Op, decode, disassemble, disassemble_program


DECODE_CASES = [
    (0x00E0, Op.CLS),
    (0x00EE, Op.RET),
    (0x0123, Op.SYS),
    (0x1ABC, Op.JP),
    (0x2ABC, Op.CALL),
    (0x3A12, Op.SE_BYTE),
    (0x4A12, Op.SNE_BYTE),
    (0x5AB0, Op.SE_REG),
    (0x6A12, Op.LD_BYTE),
    (0x7A12, Op.ADD_BYTE),
    (0x8AB0, Op.LD_REG),
    (0x8AB1, Op.OR),
    (0x8AB2, Op.AND),
    (0x8AB3, Op.XOR),
    (0x8AB4, Op.ADD_REG),
    (0x8AB5, Op.SUB),
    (0x8AB6, Op.SHR),
    (0x8AB7, Op.SUBN),
    (0x8ABE, Op.SHL),
    (0x9AB0, Op.SNE_REG),
    (0xAABC, Op.LD_I),
    (0xBABC, Op.JP_OFFSET),
    (0xCA12, Op.RND),
    (0xDAB5, Op.DRW),
    (0xEA9E, Op.SKP),
    (0xEAA1, Op.SKNP),
    (0xFA07, Op.LD_VX_DT),
    (0xFA0A, Op.LD_KEY),
    (0xFA15, Op.LD_DT),
    (0xFA18, Op.LD_ST),
    (0xFA1E, Op.ADD_I),
    (0xFA29, Op.LD_FONT),
    (0xFA33, Op.LD_BCD),
    (0xFA55, Op.STORE),
    (0xFA65, Op.LOAD),
]

UNKNOWN_OPCODES = [0x5AB1, 0x9ABF, 0x8AB8, 0x8ABF, 0xEA00, 0xEA9F, 0xFA00, 0xFAFF]


class TestDecode:

    @pytest.mark.parametrize("opcode, op", DECODE_CASES)
    def test_operation(self, opcode, op):
        assert decode(opcode).op is op

    def test_every_operation_is_reachable(self):
        decoded = {op for _, op in DECODE_CASES} | {Op.UNKNOWN}
        assert decoded == set(Op)

    @pytest.mark.parametrize("opcode", UNKNOWN_OPCODES)
    def test_unknown_carries_raw_value(self, opcode):
        ins = decode(opcode)
        assert ins.op is Op.UNKNOWN
        assert ins.opcode == opcode

    def test_operand_fields(self):
        ins = decode(0xD12F)
        assert (ins.x, ins.y, ins.n, ins.nn, ins.nnn) == (0x1, 0x2, 0xF, 0x2F, 0x12F)

    def test_decode_is_pure(self):
        first = decode(0x8AB4)
        decode.cache_clear()
        second = decode(0x8AB4)
        assert first == second
        assert first == Instruction(Op.ADD_REG, 0x8AB4, 0xA, 0xB, 0x4, 0xB4, 0xAB4)

    def test_total_over_all_opcodes(self):
        for opcode in range(0x10000):
            ins = decode(opcode)
            assert ins.opcode == opcode
            assert isinstance(ins.op, Op)


class TestDisassembly:

    @pytest.mark.parametrize("opcode, text", [
        (0x00E0, "CLS"),
        (0x1234, "JP $234"),
        (0x6A0F, "LD VA, $0F"),
        (0x8126, "SHR V1, V2"),
        (0xD125, "DRW V1, V2, 5"),
        (0xF355, "LD [I], V3"),
        (0xFFFF, "??? $FFFF"),
    ])
    def test_mnemonics(self, opcode, text):
        assert disassemble(opcode) == text
        assert str(decode(opcode)) == text

    def test_program_listing(self):
        lines = disassemble_program(bytes([0x00, 0xE0, 0xA2, 0x0A, 0x12]), 0x200)
        assert lines == [
            "0200:  CLS",
            "0202:  LD I, $20A",
            "0204:  .byte $12  ; odd trailing byte",
        ]

    def test_empty_program(self):
        assert disassemble_program(b"") == []
