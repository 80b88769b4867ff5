"""
Tests for Setup and group reconstruction
=========================================

Covers fresh type A parameter generation, descriptor text/hex handling and
validation, deterministic rebuilding of the group from a descriptor, and
``load_params`` rejecting inconsistent setup output.
"""

import gmpy2
import pytest
from charm.toolbox.pairinggroup import G1, G2, ZR, pair

from tiac import codec
from tiac.groups import (
    PairingDescriptor, SECURITY_LEVELS, generate_descriptor, load_group, load_params, setup,
)
from tiac.errors import (
    InvalidParameters, MalformedEncoding, ParameterGenerationFailure, UnsupportedSecurityLevel,
)


class TestDescriptorGeneration:

    def test_type_a_relations(self, params):
        d = params.descriptor
        assert gmpy2.is_prime(d.r)
        assert gmpy2.is_prime(d.q)
        assert d.q % 4 == 3
        assert d.h % 12 == 0
        assert d.q + 1 == d.h * d.r
        assert d.r == 2 ** d.exp2 + d.sign1 * 2 ** d.exp1 + d.sign0

    def test_sizes_match_security_level(self, params):
        rbits, qbits = SECURITY_LEVELS[256]
        assert params.descriptor.q.bit_length() == qbits
        assert rbits - 1 <= params.descriptor.r.bit_length() <= rbits
        assert params.security_level == 256

    def test_small_level(self):
        d = generate_descriptor(160, 512)
        assert d.q.bit_length() == 512
        d.validate()

    def test_qbits_too_small(self):
        with pytest.raises(ParameterGenerationFailure):
            generate_descriptor(256, 256)

    def test_each_setup_is_fresh(self, params, other_params):
        assert params.descriptor != other_params.descriptor


class TestDescriptorEncoding:

    def test_text_round_trip(self, params):
        d = params.descriptor
        text = d.to_text()
        assert text.startswith('type a\nq ')
        assert PairingDescriptor.from_text(text) == d

    def test_hex_round_trip(self, params):
        d = params.descriptor
        assert PairingDescriptor.from_hex(d.to_hex()) == d

    def test_key_order_and_blank_lines_ignored(self, params):
        lines = params.descriptor.to_text().splitlines()
        shuffled = '\n\n'.join([lines[0]] + list(reversed(lines[1:])))
        assert PairingDescriptor.from_text(shuffled) == params.descriptor

    @pytest.mark.parametrize("mutate, message", [
        (lambda t: t.replace('type a', 'type d'), "type 'a'"),
        (lambda t: '\n'.join(l for l in t.splitlines() if not l.startswith('h ')), "missing"),
        (lambda t: t + 'extra 1\n', "unexpected"),
        (lambda t: t.replace('sign0 ', 'sign0 x'), "non-integer"),
        (lambda t: t + 'a b c\n', "key value"),
    ])
    def test_malformed_text(self, params, mutate, message):
        with pytest.raises(InvalidParameters, match=message):
            PairingDescriptor.from_text(mutate(params.descriptor.to_text()))

    def test_inconsistent_values(self, params):
        d = params.descriptor
        broken = PairingDescriptor(d.q + 2, d.h, d.r, d.exp2, d.exp1, d.sign1, d.sign0)
        with pytest.raises(InvalidParameters, match="q \\+ 1"):
            PairingDescriptor.from_text(broken.to_text())

    def test_wrong_solinas_form(self, params):
        d = params.descriptor
        broken = PairingDescriptor(d.q, d.h, d.r, d.exp2, d.exp1, d.sign1, -d.sign0)
        with pytest.raises(InvalidParameters, match="Solinas"):
            broken.validate()

    def test_duplicate_key(self, params):
        text = params.descriptor.to_text()
        with pytest.raises(InvalidParameters, match="duplicate key 'q'"):
            PairingDescriptor.from_text(text + f"q {params.descriptor.q}\n")
        with pytest.raises(InvalidParameters, match="duplicate key 'type'"):
            PairingDescriptor.from_text('type a\n' + text)

    @pytest.mark.parametrize("changes, message", [
        ({'sign1': 2}, "sign1 and sign0"),
        ({'sign0': 0}, "sign1 and sign0"),
        ({'exp1': 0}, "0 < exp1 < exp2"),
        ({'exp1': 'exp2'}, "0 < exp1 < exp2"),
        ({'r': 3, 'exp2': 2, 'exp1': 1}, "below 128 bits"),
        ({'q': 1 << 5000}, "above 4096 bits"),
        ({'exp2': 10 ** 14}, "inconsistent with"),
        ({'exp2': 8 * 10 ** 9}, "inconsistent with"),
        ({'h': 'h+1'}, "multiple of 12"),
        ({'h': 0}, "multiple of 12"),
    ])
    def test_rejected_values(self, params, changes, message):
        d = params.descriptor
        fields = {key: getattr(d, key) for key in PairingDescriptor.KEYS}
        for key, value in changes.items():
            if value == 'exp2':
                value = d.exp2
            elif value == 'h+1':
                value = d.h + 1
            fields[key] = value
        with pytest.raises(InvalidParameters, match=message):
            PairingDescriptor(**fields).validate()

    def test_oversized_exponent_in_text(self):
        text = "type a\nq 7\nh 12\nr 3\nexp2 100000000000000\nexp1 1\nsign1 1\nsign0 1\n"
        with pytest.raises(InvalidParameters):
            PairingDescriptor.from_hex(text.encode('ascii').hex())

    def test_composite_r(self, params):
        d = params.descriptor
        for exp1 in range(1, d.exp2 - 1):
            r = (1 << d.exp2) + d.sign1 * (1 << exp1) + d.sign0
            if not gmpy2.is_prime(r):
                break
        broken = PairingDescriptor(12 * r - 1, 12, r, d.exp2, exp1, d.sign1, d.sign0)
        with pytest.raises(InvalidParameters, match="r is not prime"):
            broken.validate()

    def test_composite_q(self, params):
        d = params.descriptor
        h = d.h
        while gmpy2.is_prime(h * d.r - 1):
            h += 12
        broken = PairingDescriptor(h * d.r - 1, h, d.r, d.exp2, d.exp1, d.sign1, d.sign0)
        with pytest.raises(InvalidParameters, match="q is not prime"):
            broken.validate()

    def test_bad_hex(self):
        with pytest.raises(MalformedEncoding):
            PairingDescriptor.from_hex('xyz')
        with pytest.raises(InvalidParameters):
            PairingDescriptor.from_hex('ff00')


class TestLoadGroup:

    def test_rebuild_is_deterministic(self, params):
        group = load_group(params.descriptor)
        assert int(group.order()) == params.prime_order
        text = params.encode(params.g1, G1)
        rebuilt = codec.decode(text, G1, group, params.descriptor)
        assert codec.encode(rebuilt, G1, group, params.descriptor) == text

    def test_pairing_is_bilinear(self, params):
        group = params.group
        a = group.random(ZR)
        b = group.random(ZR)
        assert pair(params.g1 ** a, params.g2 ** b) == pair(params.g1, params.g2) ** (a * b)


class TestSetup:

    @pytest.mark.parametrize("level", [0, 100, 255, 512, True, '256', None, 256.0])
    def test_unsupported_level(self, level):
        with pytest.raises(UnsupportedSecurityLevel):
            setup(level)

    def test_generators(self, params):
        group = params.group
        assert params.g1 != group.init(G1, 1)
        assert params.h1 != group.init(G1, 1)
        assert params.g2 != group.init(G2, 1)
        assert params.g1 != params.h1
        assert group.ismember(params.g1)
        assert group.ismember(params.h1)
        assert group.ismember(params.g2)

    def test_serialize_fields(self, params):
        fields = params.serialize()
        assert set(fields) == {'pairing_descriptor', 'prime_order', 'g1', 'g2', 'h1'}
        for value in fields.values():
            assert value == value.lower()
            bytes.fromhex(value)
        assert int(fields['prime_order'], 16) == params.prime_order
        point_hex = 2 * codec.element_width(G1, params.descriptor)
        assert len(fields['g1']) == len(fields['h1']) == len(fields['g2']) == point_hex

    def test_generation_failure_is_wrapped(self, monkeypatch):
        def broken(descriptor):
            raise InvalidParameters("simulated library fault")
        monkeypatch.setattr('tiac.groups.load_group', broken)
        with pytest.raises(ParameterGenerationFailure, match="simulated"):
            setup(160)


class TestLoadParams:

    def test_round_trip(self, params):
        loaded = load_params(**params.serialize())
        assert loaded.descriptor == params.descriptor
        assert loaded.encode(loaded.g1, G1) == params.encode(params.g1, G1)
        assert loaded.encode(loaded.g2, G2) == params.encode(params.g2, G2)
        assert loaded.encode(loaded.h1, G1) == params.encode(params.h1, G1)

    def test_prime_order_mismatch(self, params):
        fields = params.serialize()
        width = codec.scalar_width(params.descriptor)
        fields['prime_order'] = codec.encode_int(params.prime_order - 2, width)
        with pytest.raises(InvalidParameters, match="prime_order"):
            load_params(**fields)

    def test_identity_generator(self, params):
        fields = params.serialize()
        fields['g2'] = '0' * len(fields['g2'])
        with pytest.raises(InvalidParameters, match="identity"):
            load_params(**fields)

    def test_dependent_h1(self, params):
        fields = params.serialize()
        fields['h1'] = fields['g1']
        with pytest.raises(InvalidParameters, match="independent"):
            load_params(**fields)

    def test_corrupt_generator(self, params):
        fields = params.serialize()
        fields['g1'] = 'zz' + fields['g1'][2:]
        with pytest.raises(MalformedEncoding, match="^g1: "):
            load_params(**fields)

    def test_generators_from_another_group(self, params, other_params):
        # generators published for one group are not points of another
        fields = params.serialize()
        foreign = other_params.serialize()
        fields['g1'] = foreign['g1']
        with pytest.raises(MalformedEncoding, match="g1"):
            load_params(**fields)
