import pytest
from src.evm_asm.literals import (
    parse_number, parse_string, parse_signature, parse_operand,
    keccak256, selector_bytes, selector_value, evaluate,
)
from src.evm_asm.ast import Imm, Sym, Str, Selector, FunctionSig, Instruction, AutoPush, Label

@pytest.mark.parametrize("token, value, base", [
    ("0b0", 0, 2),
    ("0b101", 5, 2),
    ("0o7", 7, 8),
    ("0o400", 256, 8),
    ("0x01", 1, 16),
    ("0xFF", 255, 16),
    ("0x0102030405060708090a0b0c0d0e0f10", 0x0102030405060708090a0b0c0d0e0f10, 16),
    ("0", 0, 10),
    ("4294967295", 4294967295, 10),
    # precisión arbitraria hasta que se emite
    ("1" + "0" * 90, 10 ** 90, 10),
])
def test_parse_number(token, value, base):
    assert parse_number(token) == Imm(value, base=base)

@pytest.mark.parametrize("token", ["0x1", "0x", "0b", "0b102", "0o8", "1abc", "-1", "label"])
def test_parse_number_rejects(token):
    assert parse_number(token) is None

def test_parse_string_escapes():
    assert parse_string('"foo.asm"') == Str("foo.asm")
    assert parse_string(r'"a\"b\\c\n"') == Str('a"b\\c\n')
    with pytest.raises(ValueError):
        parse_string(r'"bad\q"')
    with pytest.raises(ValueError):
        parse_string('"open')

@pytest.mark.parametrize("text, sig", [
    ("name()", FunctionSig("name", ())),
    ("balanceOf(address)", FunctionSig("balanceOf", ("address",))),
    ("transfer(address,uint256)", FunctionSig("transfer", ("address", "uint256"))),
])
def test_parse_signature(text, sig):
    got = parse_signature(text)
    assert got == sig
    assert got.canonical() == text

@pytest.mark.parametrize("text", ["name( )", "f(address, uint256)", "f(uint256[])", "f(,)", "f", "(x)"])
def test_parse_signature_rejects(text):
    with pytest.raises(ValueError):
        parse_signature(text)

@pytest.mark.parametrize("token, expected", [
    ("0x42", Imm(0x42, base=16)),
    ("snake_case", Sym("snake_case")),
    ("push1", Sym("push1")),
    ('"x.asm"', Str("x.asm")),
    ('selector("name()")', Selector(FunctionSig("name"))),
])
def test_parse_operand(token, expected):
    assert parse_operand(token) == expected

@pytest.mark.parametrize("token", ["", "0x1", "12ab", "a-b", 'selector("f( )")', "_x"])
def test_parse_operand_rejects(token):
    with pytest.raises(ValueError):
        parse_operand(token)

def test_keccak256_known_vectors():
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    assert keccak256(b"transfer(address,uint256)").hex() == (
        "a9059cbb2ab09eb219583f4a59a5d0623ade346d962bcd4e46b11da047c9049b"
    )

@pytest.mark.parametrize("text, selector", [
    ("name()", "06fdde03"),
    ("balanceOf(address)", "70a08231"),
    ("transfer(address,uint256)", "a9059cbb"),
    ("approve(address,uint256)", "095ea7b3"),
])
def test_selector_bytes(text, selector):
    sig = parse_signature(text)
    assert selector_bytes(sig).hex() == selector
    assert selector_value(sig) == int(selector, 16)

def test_evaluate_replaces_selectors_by_width():
    sig = FunctionSig("transfer", ("address", "uint256"))
    ops = [
        Label("l", 1, 1),
        Instruction("push4", 0x63, 2, 1, width=4, operand=Selector(sig)),
        Instruction("push32", 0x7f, 3, 1, width=32, operand=Selector(sig)),
        AutoPush(Selector(sig), 4, 1),
        AutoPush(Sym("l"), 5, 1),
    ]
    out = evaluate(ops)
    assert out[0] == ops[0]
    assert out[1].operand == Imm(0xa9059cbb, base=16)
    assert out[2].operand.value == int.from_bytes(keccak256(b"transfer(address,uint256)"), "big")
    assert out[3].operand == Imm(0xa9059cbb, base=16)
    assert out[4] == ops[4]
