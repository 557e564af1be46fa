import unittest
from retro_core_6502.transport.memory import Memory
from retro_core_6502.arch.mos6502.cpu import Mos6502Cpu

FLAG_NAMES = ("flag_n", "flag_v", "flag_b", "flag_d", "flag_i", "flag_z", "flag_c")

# (opcode, flag, flag value that takes the branch)
BRANCHES = (
    (0x10, "flag_n", False),  # BPL
    (0x30, "flag_n", True),   # BMI
    (0x50, "flag_v", False),  # BVC
    (0x70, "flag_v", True),   # BVS
    (0x90, "flag_c", False),  # BCC
    (0xB0, "flag_c", True),   # BCS
    (0xD0, "flag_z", False),  # BNE
    (0xF0, "flag_z", True),   # BEQ
)

def _flags(state):
    return {name: getattr(state, name) for name in FLAG_NAMES}

class TestMos6502ControlInstructions(unittest.TestCase):
    def setUp(self):
        self.memory = Memory()
        self.cpu = Mos6502Cpu(self.memory)

    def _execute(self, opcode, operands=(), current_pc=0x1000, **registers):
        self.memory.load(current_pc, [opcode] + list(operands))
        self.cpu.set_state(self.cpu.get_state().replace(pc=current_pc, **registers))
        self.cpu.step()
        return self.cpu.get_state()

    # --- Branch ---

    def test_branches(self):
        for opcode, flag, taken_value in BRANCHES:
            for value in (False, True):
                with self.subTest(opcode=f"{opcode:02X}", value=value):
                    state = self._execute(opcode, [0x04], **{flag: value})
                    expected = 0x1006 if value == taken_value else 0x1002
                    self.assertEqual(state.pc, expected)
                    self.assertEqual(getattr(state, flag), value)

    def test_branch_leaves_flags_untouched(self):
        registers = dict(flag_n=True, flag_v=False, flag_d=True, flag_i=False, flag_z=True, flag_c=False)
        state = self._execute(0xF0, [0xFE], **registers)
        self.assertEqual(state.pc, 0x1000)
        for name, value in registers.items():
            self.assertEqual(getattr(state, name), value)

    def test_bra_backward(self):
        # BNE -$10: 1002 - 16 = 0FF2
        state = self._execute(0xD0, [0xF0], flag_z=False)
        self.assertEqual(state.pc, 0x0FF2)

    # --- Jump / Subroutine ---

    def test_jmp_absolute(self):
        state = self._execute(0x4C, [0x00, 0x20])
        self.assertEqual(state.pc, 0x2000)

    def test_jsr_pushes_last_byte_address(self):
        state = self._execute(0x20, [0x00, 0x20], sp=0xFF)
        self.assertEqual(state.pc, 0x2000)
        self.assertEqual(state.sp, 0xFD)
        self.assertEqual(self.memory.peek(0x01FF), 0x10)
        self.assertEqual(self.memory.peek(0x01FE), 0x02)

    def test_rts(self):
        self.memory.load(0x01FE, [0x02, 0x10])
        state = self._execute(0x60, current_pc=0x2000, sp=0xFD)
        self.assertEqual(state.pc, 0x1003)
        self.assertEqual(state.sp, 0xFF)

    # --- Interrupt ---

    def test_brk_and_rti(self):
        self.memory.load(0xFFFE, [0x00, 0x80])
        self.memory.write(0x8000, 0x40) # RTI

        state = self._execute(0x00, current_pc=0x0200, sp=0xFD, flag_i=False, flag_c=True)
        self.assertEqual(state.pc, 0x8000)
        self.assertEqual(state.sp, 0xFA)
        self.assertTrue(state.flag_i)
        self.assertFalse(state.flag_b) # Bはスタック上のバイトにのみ立つ
        self.assertEqual(self.memory.peek(0x01FD), 0x02)
        self.assertEqual(self.memory.peek(0x01FC), 0x02)
        self.assertEqual(self.memory.peek(0x01FB), 0x31) # C | B | bit5

        self.cpu.step()
        state = self.cpu.get_state()
        self.assertEqual(state.pc, 0x0202)
        self.assertEqual(state.sp, 0xFD)
        self.assertFalse(state.flag_i)
        self.assertFalse(state.flag_b)
        self.assertTrue(state.flag_c)

    # --- Stack ---

    def test_pha_pla(self):
        state = self._execute(0x48, a=0x80, sp=0xFF)
        self.assertEqual(state.sp, 0xFE)
        self.assertEqual(self.memory.peek(0x01FF), 0x80)

        state = self._execute(0x68, a=0x00, flag_n=False, flag_z=True)
        self.assertEqual(state.a, 0x80)
        self.assertEqual(state.sp, 0xFF)
        self.assertTrue(state.flag_n)
        self.assertFalse(state.flag_z)

    def test_stack_pointer_wraps(self):
        state = self._execute(0x48, a=0x11, sp=0x00)
        self.assertEqual(state.sp, 0xFF)
        self.assertEqual(self.memory.peek(0x0100), 0x11)

        state = self._execute(0x68)
        self.assertEqual(state.sp, 0x00)
        self.assertEqual(state.a, 0x11)

    def test_php_sets_break_and_bit5(self):
        state = self._execute(0x08, sp=0xFF, flag_n=True, flag_i=False, flag_b=False, flag_c=True)
        self.assertEqual(self.memory.peek(0x01FF), 0xB1)
        self.assertEqual(state.sp, 0xFE)
        self.assertFalse(state.flag_b)

    def test_plp_ignores_break(self):
        self.memory.write(0x01FF, 0xDB) # N V B D Z C
        state = self._execute(0x28, sp=0xFE)
        self.assertEqual(state.sp, 0xFF)
        self.assertTrue(state.flag_n)
        self.assertTrue(state.flag_v)
        self.assertFalse(state.flag_b)
        self.assertTrue(state.flag_d)
        self.assertFalse(state.flag_i)
        self.assertTrue(state.flag_z)
        self.assertTrue(state.flag_c)

    # --- Flags ---

    def test_flag_instructions_touch_only_their_flag(self):
        cases = (
            (0x18, "flag_c", False),  # CLC
            (0x38, "flag_c", True),   # SEC
            (0x58, "flag_i", False),  # CLI
            (0x78, "flag_i", True),   # SEI
            (0xB8, "flag_v", False),  # CLV
            (0xD8, "flag_d", False),  # CLD
            (0xF8, "flag_d", True),   # SED
        )
        for opcode, flag, expected in cases:
            for initial in (False, True):
                with self.subTest(opcode=f"{opcode:02X}", initial=initial):
                    registers = {name: initial for name in FLAG_NAMES}
                    before = self._execute(0xEA, **registers)
                    after = self._execute(opcode)
                    expected_flags = _flags(before)
                    expected_flags[flag] = expected
                    self.assertEqual(_flags(after), expected_flags)
                    self.assertEqual(after.pc, 0x1001)

    def test_clc_keeps_negative(self):
        state = self._execute(0x18, flag_n=True, flag_c=True)
        self.assertFalse(state.flag_c)
        self.assertTrue(state.flag_n)

    def test_nop(self):
        before = self.cpu.get_state().replace(pc=0x1000, a=0x12)
        state = self._execute(0xEA, a=0x12)
        self.assertEqual(state.replace(pc=0x1000), before)
        self.assertEqual(state.pc, 0x1001)

if __name__ == '__main__':
    unittest.main()
