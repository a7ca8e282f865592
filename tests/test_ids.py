from hateengine.ids import UUID


def test_generated_ids_are_consecutive():
    first = UUID()
    second = UUID()
    assert second.u64 == first.u64 + 1


def test_explicit_id_is_kept():
    assert UUID(42).u64 == 42


def test_explicit_id_does_not_advance_counter():
    before = UUID()
    UUID(1000)
    after = UUID()
    assert after.u64 == before.u64 + 1


def test_equality_and_hash():
    a = UUID(7)
    b = UUID(7)
    assert a == b
    assert hash(a) == hash(b)
    assert {a: "x"}[b] == "x"


def test_different_ids_are_not_equal():
    assert not (UUID(1) == UUID(2))


def test_comparison_with_other_type_is_false():
    assert (UUID(5) == 5) is False


def test_int_conversion():
    assert int(UUID(9)) == 9


def test_value_wraps_to_64_bits():
    assert UUID(2**64 + 3).u64 == 3