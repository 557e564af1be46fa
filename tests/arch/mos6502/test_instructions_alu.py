import unittest
from retro_core_6502.transport.memory import Memory
from retro_core_6502.arch.mos6502.cpu import Mos6502Cpu

SAMPLES = (0x00, 0x01, 0x0F, 0x10, 0x40, 0x7F, 0x80, 0x81, 0xC0, 0xFE, 0xFF)

def _signed(value):
    return value - 0x100 if value & 0x80 else value

class TestMos6502AluInstructions(unittest.TestCase):
    def setUp(self):
        self.memory = Memory()
        self.cpu = Mos6502Cpu(self.memory)

    def _execute(self, opcode, operands=(), **registers):
        self.memory.load(0x0200, [opcode] + list(operands))
        self.cpu.set_state(self.cpu.get_state().replace(pc=0x0200, **registers))
        self.cpu.step()
        return self.cpu.get_state()

    # --- ADC / SBC ---

    def test_adc_sampled_grid(self):
        for a in SAMPLES:
            for val in SAMPLES:
                for carry in (0, 1):
                    with self.subTest(a=a, val=val, carry=carry):
                        state = self._execute(0x69, [val], a=a, flag_c=bool(carry), flag_d=False)
                        total = a + val + carry
                        signed_total = _signed(a) + _signed(val) + carry
                        self.assertEqual(state.a, total & 0xFF)
                        self.assertEqual(state.flag_c, total > 0xFF)
                        self.assertEqual(state.flag_z, (total & 0xFF) == 0)
                        self.assertEqual(state.flag_n, bool(total & 0x80))
                        self.assertEqual(state.flag_v, not -128 <= signed_total <= 127)

    def test_adc_signed_overflow(self):
        # ADC #$01 with A=$7F -> $80
        state = self._execute(0x69, [0x01], a=0x7F, flag_c=False)
        self.assertEqual(state.a, 0x80)
        self.assertTrue(state.flag_v)
        self.assertTrue(state.flag_n)
        self.assertFalse(state.flag_c)
        self.assertFalse(state.flag_z)

    def test_adc_unsigned_carry(self):
        state = self._execute(0x69, [0x01], a=0xFF, flag_c=False)
        self.assertEqual(state.a, 0x00)
        self.assertTrue(state.flag_c)
        self.assertTrue(state.flag_z)
        self.assertFalse(state.flag_v)

    def test_adc_zeropage(self):
        self.memory.write(0x0010, 0x22)
        state = self._execute(0x65, [0x10], a=0x11, flag_c=True)
        self.assertEqual(state.a, 0x34)

    def test_sbc_sampled_grid(self):
        for a in SAMPLES:
            for val in SAMPLES:
                for carry in (0, 1):
                    with self.subTest(a=a, val=val, carry=carry):
                        state = self._execute(0xE9, [val], a=a, flag_c=bool(carry), flag_d=False)
                        diff = a - val - (1 - carry)
                        signed_diff = _signed(a) - _signed(val) - (1 - carry)
                        self.assertEqual(state.a, diff & 0xFF)
                        self.assertEqual(state.flag_c, diff >= 0)
                        self.assertEqual(state.flag_z, (diff & 0xFF) == 0)
                        self.assertEqual(state.flag_n, bool(diff & 0x80))
                        self.assertEqual(state.flag_v, not -128 <= signed_diff <= 127)

    def test_sbc_borrow(self):
        # SEC; SBC #$10 with A=$05 -> $F5
        state = self._execute(0xE9, [0x10], a=0x05, flag_c=True)
        self.assertEqual(state.a, 0xF5)
        self.assertTrue(state.flag_n)
        self.assertFalse(state.flag_c)

    def test_adc_decimal(self):
        state = self._execute(0x69, [0x34], a=0x12, flag_c=False, flag_d=True)
        self.assertEqual(state.a, 0x46)
        self.assertFalse(state.flag_c)

    def test_adc_decimal_carry(self):
        # 58 + 46 + 1 = 105
        state = self._execute(0x69, [0x46], a=0x58, flag_c=True, flag_d=True)
        self.assertEqual(state.a, 0x05)
        self.assertTrue(state.flag_c)

    def test_sbc_decimal(self):
        state = self._execute(0xE9, [0x12], a=0x46, flag_c=True, flag_d=True)
        self.assertEqual(state.a, 0x34)
        self.assertTrue(state.flag_c)

    def test_sbc_decimal_borrow(self):
        # 12 - 21 = -9 -> 91, borrow
        state = self._execute(0xE9, [0x21], a=0x12, flag_c=True, flag_d=True)
        self.assertEqual(state.a, 0x91)
        self.assertFalse(state.flag_c)

    # --- AND / ORA / EOR / BIT ---

    def test_and_keeps_carry_and_overflow(self):
        state = self._execute(0x29, [0x0F], a=0xF0, flag_c=True, flag_v=True)
        self.assertEqual(state.a, 0x00)
        self.assertTrue(state.flag_z)
        self.assertFalse(state.flag_n)
        self.assertTrue(state.flag_c)
        self.assertTrue(state.flag_v)

    def test_and_identity(self):
        state = self._execute(0x29, [0xFF], a=0xAA)
        self.assertEqual(state.a, 0xAA)
        self.assertTrue(state.flag_n)

    def test_ora(self):
        state = self._execute(0x09, [0x01], a=0x80, flag_c=True)
        self.assertEqual(state.a, 0x81)
        self.assertTrue(state.flag_n)
        self.assertFalse(state.flag_z)
        self.assertTrue(state.flag_c)

    def test_eor(self):
        state = self._execute(0x49, [0xFF], a=0xFF, flag_v=True)
        self.assertEqual(state.a, 0x00)
        self.assertTrue(state.flag_z)
        self.assertTrue(state.flag_v)

        state = self._execute(0x49, [0x00], a=0x5A)
        self.assertEqual(state.a, 0x5A)

    def test_logical_ops_keep_carry_and_overflow(self):
        for opcode in (0x29, 0x09, 0x49): # AND, ORA, EOR
            for a, val in ((0x00, 0x00), (0xFF, 0xFF), (0x80, 0x7F), (0x5A, 0xA5)):
                for carry in (False, True):
                    for overflow in (False, True):
                        with self.subTest(opcode=f"{opcode:02X}", a=a, val=val, c=carry, v=overflow):
                            state = self._execute(opcode, [val], a=a, flag_c=carry, flag_v=overflow)
                            self.assertEqual(state.flag_c, carry)
                            self.assertEqual(state.flag_v, overflow)

    def test_ora_identity(self):
        state = self._execute(0x09, [0x00], a=0x5A)
        self.assertEqual(state.a, 0x5A)

    def test_bit(self):
        self.memory.write(0x0010, 0xC0)
        state = self._execute(0x24, [0x10], a=0x3F)
        self.assertEqual(state.a, 0x3F)
        self.assertTrue(state.flag_z)
        self.assertTrue(state.flag_v)
        self.assertTrue(state.flag_n)

    def test_bit_absolute_clears(self):
        self.memory.write(0x1234, 0x01)
        state = self._execute(0x2C, [0x34, 0x12], a=0x01, flag_v=True, flag_n=True)
        self.assertFalse(state.flag_z)
        self.assertFalse(state.flag_v)
        self.assertFalse(state.flag_n)

    # --- CMP / CPX / CPY ---

    def test_cmp_equal(self):
        state = self._execute(0xC9, [0x40], a=0x40)
        self.assertEqual(state.a, 0x40)
        self.assertTrue(state.flag_z)
        self.assertTrue(state.flag_c)
        self.assertFalse(state.flag_n)

    def test_cmp_less(self):
        state = self._execute(0xC9, [0x41], a=0x40)
        self.assertFalse(state.flag_z)
        self.assertFalse(state.flag_c)
        self.assertTrue(state.flag_n)

    def test_cmp_greater(self):
        state = self._execute(0xC9, [0x30], a=0x40, flag_v=True)
        self.assertFalse(state.flag_z)
        self.assertTrue(state.flag_c)
        self.assertFalse(state.flag_n)
        self.assertTrue(state.flag_v)

    def test_cpx_cpy(self):
        state = self._execute(0xE0, [0x05], x=0x05)
        self.assertTrue(state.flag_z)
        self.assertTrue(state.flag_c)

        state = self._execute(0xC0, [0x80], y=0x10)
        self.assertFalse(state.flag_c)
        self.assertTrue(state.flag_n)

    # --- Shift / Rotate ---

    def test_asl_accumulator(self):
        state = self._execute(0x0A, a=0x81)
        self.assertEqual(state.a, 0x02)
        self.assertTrue(state.flag_c)
        self.assertFalse(state.flag_n)
        self.assertEqual(state.pc, 0x0201)

    def test_asl_zeropage(self):
        self.memory.write(0x0020, 0x40)
        state = self._execute(0x06, [0x20], a=0x11)
        self.assertEqual(self.memory.peek(0x0020), 0x80)
        self.assertEqual(state.a, 0x11)
        self.assertTrue(state.flag_n)
        self.assertFalse(state.flag_c)

    def test_lsr_accumulator(self):
        state = self._execute(0x4A, a=0x01, flag_n=True)
        self.assertEqual(state.a, 0x00)
        self.assertTrue(state.flag_c)
        self.assertTrue(state.flag_z)
        self.assertFalse(state.flag_n)

    def test_rol_accumulator(self):
        state = self._execute(0x2A, a=0x80, flag_c=True)
        self.assertEqual(state.a, 0x01)
        self.assertTrue(state.flag_c)
        self.assertFalse(state.flag_z)

    def test_ror_accumulator(self):
        state = self._execute(0x6A, a=0x01, flag_c=True)
        self.assertEqual(state.a, 0x80)
        self.assertTrue(state.flag_c)
        self.assertTrue(state.flag_n)

    def test_ror_absolute(self):
        self.memory.write(0x1234, 0x02)
        state = self._execute(0x6E, [0x34, 0x12], flag_c=False)
        self.assertEqual(self.memory.peek(0x1234), 0x01)
        self.assertFalse(state.flag_c)

    # --- INC / DEC / INX / DEX / INY / DEY ---

    def test_inc_wraps(self):
        self.memory.write(0x0030, 0xFF)
        state = self._execute(0xE6, [0x30], flag_c=True)
        self.assertEqual(self.memory.peek(0x0030), 0x00)
        self.assertTrue(state.flag_z)
        self.assertTrue(state.flag_c)

    def test_dec_wraps(self):
        state = self._execute(0xC6, [0x30])
        self.assertEqual(self.memory.peek(0x0030), 0xFF)
        self.assertTrue(state.flag_n)
        self.assertFalse(state.flag_z)

    def test_register_increments(self):
        state = self._execute(0xE8, x=0xFF)
        self.assertEqual(state.x, 0x00)
        self.assertTrue(state.flag_z)

        state = self._execute(0xCA, x=0x00)
        self.assertEqual(state.x, 0xFF)
        self.assertTrue(state.flag_n)

        state = self._execute(0xC8, y=0x7F)
        self.assertEqual(state.y, 0x80)
        self.assertTrue(state.flag_n)

        state = self._execute(0x88, y=0x01)
        self.assertEqual(state.y, 0x00)
        self.assertTrue(state.flag_z)

if __name__ == '__main__':
    unittest.main()
