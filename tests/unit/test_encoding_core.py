import pytest
from src.evm_asm.assembler import assemble_text
from src.evm_asm.encoding import encode
from src.evm_asm.linker import Layout
from src.evm_asm.ast import AutoPush, Imm, Raw
from src.evm_asm.diagnostics import ValueTooLargeError, UnresolvedMacroError

def _code(src: str) -> str:
    return assemble_text(src).code.hex()

def test_loop_scenario():
    asm = assemble_text("push1 0x01\nloop:\njumpdest\npush1 0x00\njump")
    assert asm.code == bytes([0x60, 0x01, 0x5B, 0x60, 0x00, 0x56])
    assert asm.labels == {"loop": 2}

@pytest.mark.parametrize("src, expected", [
    ("push1 0b0; push1 0b1", "60006001"),
    ("push2 42", "61002a"),
    ("push2 256", "610100"),
    ("push4 4294967295", "63ffffffff"),
    ("push8 0x0102030405060708", "670102030405060708"),
    ("push32 1", "7f" + "00" * 31 + "01"),
    ("swap1\ndup16\nlog4", "908fa4"),
    ("push0\nstop", "5f00"),
])
def test_explicit_widths(src, expected):
    assert _code(src) == expected

@pytest.mark.parametrize("src", [
    "push1 256",
    "push2 0x010203",
    "push32 " + str(1 << 256),
    "%push(" + str(1 << 256) + ")",
])
def test_value_too_large(src):
    with pytest.raises(ValueTooLargeError) as ei:
        assemble_text(src, filename="big.asm")
    assert ei.value.file == "big.asm" and ei.value.line == 1

def test_sized_push_of_label_must_fit():
    src = "push1 end\n" + "\n".join(["jumpdest"] * 300) + "\nend:"
    with pytest.raises(ValueTooLargeError):
        assemble_text(src)

def test_sized_push_of_label():
    assert _code("push2 end\njump\nend:") == "61000456"

def test_selectors_in_explicit_and_auto_push():
    assert _code('push4 selector("transfer(address,uint256)")') == "63a9059cbb"
    assert _code('%push(selector("transfer(address,uint256)"))') == "63a9059cbb"
    assert _code('push32 selector("transfer(address,uint256)")') == (
        "7fa9059cbb2ab09eb219583f4a59a5d0623ade346d962bcd4e46b11da047c9049b"
    )

def test_auto_push_minimal_width():
    src = "%push(end)\n" + "\n".join(["jumpdest"] * 300) + "\nend:"
    code = assemble_text(src).code
    # 303 = 0x012f: push2 y exactamente 2 bytes de operando
    assert code[:3] == bytes([0x61, 0x01, 0x2f])
    assert len(code) == 303

def test_auto_push_zero():
    assert _code("%push(0)") == "6000"

def test_raw_passthrough():
    ops = [Raw(b"\xde\xad", 1, 1), AutoPush(Imm(7), 2, 1)]
    layout = Layout(labels={}, offsets=[0, 2], widths={1: 1}, size=4, passes=1)
    assert encode(ops, layout) == b"\xde\xad\x60\x07"

def test_auto_push_without_width_is_internal_error():
    ops = [AutoPush(Imm(7), 1, 1)]
    layout = Layout(labels={}, offsets=[0], widths={}, size=2, passes=1)
    with pytest.raises(UnresolvedMacroError):
        encode(ops, layout)

@pytest.mark.parametrize("src, shown", [
    ("push1 256", "Valor 256 no cabe"),
    ("push1 0x0100", "Valor 0x100 no cabe"),
    ("push1 0b100000000", "Valor 0b100000000 no cabe"),
    ("push1 0o400", "Valor 0o400 no cabe"),
])
def test_value_too_large_keeps_literal_base(src, shown):
    with pytest.raises(ValueTooLargeError) as ei:
        assemble_text(src)
    assert shown in str(ei.value)
    assert "máximo 0xff" in str(ei.value)

def test_value_too_large_label_in_hex():
    src = "push1 end\n" + "\n".join(["jumpdest"] * 300) + "\nend:"
    with pytest.raises(ValueTooLargeError) as ei:
        assemble_text(src)
    assert ei.value.base == 16
    assert "Valor 0x" in str(ei.value)
