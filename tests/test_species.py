"""
Tests for genome layout, gene decoding and run parameters.

Run with: python -m pytest tests/test_species.py -v
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cgpengine.core.parameters import CGPParameters, TOPOLOGY_FIXED_LAYER
from cgpengine.core.species import (
    GeneRole,
    GenomeLayout,
    Species,
    random_species,
)
from cgpengine.core.errors import (
    OutOfRange,
    UnsupportedType,
    UnsupportedOperation,
    LengthMismatch,
    InvalidConfig,
)


@pytest.fixture
def params():
    """2 inputs, 4 nodes of arity 2, 1 output: genome size 13."""
    return CGPParameters(
        num_variables=2,
        num_outputs=1,
        num_function_nodes=4,
        num_functions=8,
        max_arity=2,
    )


@pytest.fixture
def layout(params):
    return GenomeLayout(params)


@pytest.fixture
def fixed_layout():
    """3 inputs, 3 layers of width 2."""
    return GenomeLayout(CGPParameters(
        num_variables=3,
        num_outputs=2,
        num_function_nodes=6,
        num_functions=8,
        max_arity=2,
        topology=TOPOLOGY_FIXED_LAYER,
        layer_width=2,
    ))


class TestParameters:
    """Tests for CGPParameters."""

    def test_num_inputs_includes_constants(self):
        """Constants extend the input address space."""
        p = CGPParameters(num_variables=3, num_outputs=1, num_constants=2)
        assert p.num_inputs == 5

    def test_invalid_values(self):
        """Non-positive counts and unknown topologies are rejected."""
        with pytest.raises(InvalidConfig):
            CGPParameters(num_variables=0, num_outputs=1)
        with pytest.raises(InvalidConfig):
            CGPParameters(num_variables=2, num_outputs=1, topology='ring')
        with pytest.raises(InvalidConfig):
            CGPParameters(num_variables=2, num_outputs=1, levels_back=0)

    def test_fixed_layer_requires_even_split(self):
        """Node count must be a multiple of the layer width."""
        with pytest.raises(InvalidConfig):
            CGPParameters(
                num_variables=2, num_outputs=1, num_function_nodes=10,
                topology=TOPOLOGY_FIXED_LAYER, layer_width=3,
            )

    def test_layer_width_falls_back_to_levels_back(self):
        """Without layer_width, levels_back acts as the layer width."""
        p = CGPParameters(
            num_variables=2, num_outputs=1, num_function_nodes=12,
            topology=TOPOLOGY_FIXED_LAYER, levels_back=4,
        )
        assert p.effective_layer_width == 4
        assert p.num_layers == 3

    def test_with_updates_revalidates(self, params):
        """Derived copies go through validation again."""
        updated = params.with_updates(num_outputs=5)
        assert updated.num_outputs == 5
        assert params.num_outputs == 1
        with pytest.raises(InvalidConfig):
            params.with_updates(num_outputs=0)

    def test_serialization(self, params, tmp_path):
        """Test parameters to/from JSON."""
        path = tmp_path / 'params.json'
        params.save(path)
        assert CGPParameters.load(path) == params

    def test_unknown_keys_rejected(self):
        """Unknown keys in a config dict are an error."""
        with pytest.raises(InvalidConfig):
            CGPParameters.from_dict({'num_variables': 2, 'num_outputs': 1, 'population': 5})


class TestGeneRoles:
    """Tests for position-derived roles and node numbering."""

    def test_genome_size(self, layout):
        """num_nodes * (max_arity + 1) + num_outputs."""
        assert layout.genome_size() == 4 * 3 + 1

    def test_decode_role(self, layout):
        """Function genes every max_arity+1 positions, outputs at the end."""
        roles = [layout.decode_role(p) for p in range(layout.genome_size())]
        assert roles[0] == GeneRole.FUNCTION
        assert roles[1] == GeneRole.CONNECTION
        assert roles[2] == GeneRole.CONNECTION
        assert roles[3] == GeneRole.FUNCTION
        assert roles[9] == GeneRole.FUNCTION
        assert roles[12] == GeneRole.OUTPUT
        assert roles.count(GeneRole.FUNCTION) == 4
        assert roles.count(GeneRole.CONNECTION) == 8
        assert roles.count(GeneRole.OUTPUT) == 1

    def test_decode_role_is_pure(self, layout):
        """Repeated queries give identical answers."""
        first = [layout.decode_role(p) for p in range(layout.genome_size())]
        second = [layout.decode_role(p) for p in range(layout.genome_size())]
        assert first == second

    def test_out_of_range_positions(self, layout):
        """Positions outside the genome raise OutOfRange."""
        for position in (-1, layout.genome_size(), 1000):
            with pytest.raises(OutOfRange):
                layout.decode_role(position)
            with pytest.raises(OutOfRange):
                layout.min_gene(position)
            with pytest.raises(OutOfRange):
                layout.max_gene(position)

    def test_out_of_range_is_index_error(self, layout):
        """OutOfRange belongs to the IndexError family."""
        with pytest.raises(IndexError):
            layout.decode_role(99)

    def test_node_number_of(self, layout):
        """Node numbers start after the inputs."""
        assert layout.node_number_of(0) == 2
        assert layout.node_number_of(2) == 2
        assert layout.node_number_of(4) == 3
        assert layout.node_number_of(11) == 5
        # Output positions: num_inputs + num_nodes + (position - num_nodes * max_arity)
        assert layout.node_number_of(12) == 2 + 4 + (12 - 4 * 2)

    def test_position_of_node(self, layout):
        """Inverse of node_number_of on function genes."""
        assert layout.position_of_node(2) == 0
        assert layout.position_of_node(5) == 9
        with pytest.raises(OutOfRange):
            layout.position_of_node(1)
        with pytest.raises(OutOfRange):
            layout.position_of_node(6)

    def test_round_trip(self, layout):
        """position_of_node(node_number_of(p)) returns the node's function gene."""
        for p in range(layout.node_block):
            node_position = layout.position_of_node(layout.node_number_of(p))
            if layout.decode_role(p) == GeneRole.FUNCTION:
                assert node_position == p
            else:
                assert node_position == p - p % layout.node_size


class TestClassicBounds:
    """Tests for levels-back connection bounds."""

    def test_function_bounds(self, layout):
        """Function genes span the whole function set."""
        for p in range(0, layout.node_block, layout.node_size):
            assert layout.min_gene(p) == 0
            assert layout.max_gene(p) == 7

    def test_output_bounds(self, layout):
        """Outputs may reference any input or node."""
        assert layout.min_gene(12) == 0
        assert layout.max_gene(12) == 2 + 4 - 1

    def test_connections_point_backward(self, layout):
        """max_gene is always the previous node number."""
        for p in range(layout.node_block):
            if layout.decode_role(p) == GeneRole.CONNECTION:
                assert layout.max_gene(p) == layout.node_number_of(p) - 1
                assert layout.min_gene(p) <= layout.max_gene(p)

    def test_levels_back_limits_reach(self, params):
        """levels_back=1 only allows the immediately preceding node."""
        layout = GenomeLayout(params.with_updates(levels_back=1))
        assert layout.min_gene(10) == 4
        assert layout.max_gene(10) == 4
        # The first node can only see the last input
        assert layout.min_gene(1) == 1
        assert layout.max_gene(1) == 1

    def test_bounds_do_not_depend_on_genome(self, params):
        """Two different genomes share identical bounds."""
        rng = np.random.default_rng(0)
        a = random_species(params, rng)
        b = random_species(params, rng)
        for p in range(a.genome_size()):
            assert a.min_gene(p) == b.min_gene(p)
            assert a.max_gene(p) == b.max_gene(p)


class TestFixedLayerBounds:
    """Tests for fixed-layer connection bounds."""

    def test_first_layer_sees_inputs(self, fixed_layout):
        """Layer 0 connects to system inputs only."""
        for node_index in (0, 1):
            p = node_index * 3 + 1
            assert fixed_layout.min_gene(p) == 0
            assert fixed_layout.max_gene(p) == 2

    def test_later_layers_see_previous_layer(self, fixed_layout):
        """Layer L connects to the nodes of layer L-1."""
        # Layer 1: nodes 5 and 6 reference layer 0 (nodes 3, 4)
        assert fixed_layout.min_gene(7) == 3
        assert fixed_layout.max_gene(7) == 4
        assert fixed_layout.min_gene(11) == 3
        # Layer 2: nodes 7 and 8 reference layer 1 (nodes 5, 6)
        assert fixed_layout.min_gene(13) == 5
        assert fixed_layout.max_gene(13) == 6

    def test_fixed_layer_outputs_unrestricted(self, fixed_layout):
        """Output genes ignore layering."""
        assert fixed_layout.max_gene(fixed_layout.node_block) == 3 + 6 - 1

    def test_all_connections_backward(self, fixed_layout):
        """Every legal connection value is smaller than the node number."""
        for p in range(fixed_layout.node_block):
            if fixed_layout.decode_role(p) == GeneRole.CONNECTION:
                assert fixed_layout.max_gene(p) < fixed_layout.node_number_of(p)


class TestReinterpretReal:
    """Tests for real-valued gene reinterpretation."""

    def test_function_gene_scaling(self, layout):
        """Function genes scale by num_functions."""
        assert layout.reinterpret_real(0.0, 0) == 0
        assert layout.reinterpret_real(0.5, 0) == 4
        assert layout.reinterpret_real(0.99, 0) == 7
        assert layout.reinterpret_real(1.0, 0) == 7

    def test_connection_gene_scaling(self, layout):
        """Unrestricted connection genes scale by the node number."""
        # Node 5 has 5 possible predecessors
        assert layout.reinterpret_real(0.99, 10) == 4
        assert layout.reinterpret_real(0.19, 10) == 0
        assert layout.reinterpret_real(0.2, 10) == 1

    def test_output_gene_scaling(self, layout):
        """Output genes scale by num_inputs + num_nodes."""
        assert layout.reinterpret_real(0.5, 12) == 3
        assert layout.reinterpret_real(1.0, 12) == 5

    def test_values_outside_domain(self, layout):
        """Reals outside [0, 1] are rejected, not clamped."""
        with pytest.raises(OutOfRange):
            layout.reinterpret_real(-0.1, 0)
        with pytest.raises(OutOfRange):
            layout.reinterpret_real(1.5, 12)
        with pytest.raises(OutOfRange):
            layout.reinterpret_real(float('nan'), 1)

    @pytest.mark.parametrize('overrides', [
        {},
        {'levels_back': 2},
        {'topology': TOPOLOGY_FIXED_LAYER, 'layer_width': 2},
    ])
    def test_always_within_bounds(self, params, overrides):
        """Reinterpreted values stay inside [min_gene, max_gene]."""
        layout = GenomeLayout(params.with_updates(**overrides))
        for p in range(layout.genome_size()):
            for value in np.linspace(0.0, 1.0, 101):
                gene = layout.reinterpret_real(value, p)
                assert layout.min_gene(p) <= gene <= layout.max_gene(p)


class TestSpecies:
    """Tests for Species construction and conversion."""

    def test_integer_species(self, params):
        """Integer genomes are discrete and read-only."""
        genes = [0, 0, 1] * 4 + [5]
        species = Species(params, genes)
        assert not species.real_valued
        assert len(species) == 13
        assert species.genome.dtype == np.int64
        with pytest.raises(ValueError):
            species.genome[0] = 3

    def test_caller_array_not_frozen(self, params):
        """The species copies the caller's array."""
        genes = np.array([0, 0, 1] * 4 + [5])
        Species(params, genes)
        genes[0] = 1
        assert genes[0] == 1

    def test_real_species(self, params):
        """Floating genomes are real-valued."""
        species = Species(params, np.full(13, 0.5))
        assert species.real_valued

    def test_mixed_genome_rejected(self, params):
        """Integer and real genes cannot be mixed."""
        genes = [0, 0, 1] * 4 + [0.5]
        with pytest.raises(UnsupportedType):
            Species(params, genes)

    def test_unsupported_dtypes(self, params):
        """Only integer and real genomes are supported."""
        with pytest.raises(UnsupportedType):
            Species(params, np.zeros(13, dtype=bool))
        with pytest.raises(UnsupportedType):
            Species(params, np.array(['a'] * 13))
        with pytest.raises(UnsupportedType):
            Species(params, [None] * 13)

    def test_wrong_length(self, params):
        """Genome length must match the layout."""
        with pytest.raises(LengthMismatch):
            Species(params, [0] * 12)

    def test_out_of_range_genes(self, params):
        """Illegal gene values are reported, never clamped."""
        genes = [0, 0, 1] * 4 + [5]
        genes[1] = 2  # node 2 can only reference inputs 0 and 1
        with pytest.raises(OutOfRange):
            Species(params, genes)
        with pytest.raises(OutOfRange):
            Species(params, np.full(13, 1.5))

    def test_to_discrete_genome(self, params):
        """Real genomes decode gene by gene."""
        real = np.array([0.8125, 0.25, 0.75, 0.0, 0.1, 0.5, 0.6875, 0.9, 0.1,
                         0.0, 0.0, 0.0, 0.5])
        species = Species(params, real)
        discrete = species.to_discrete_genome()
        assert discrete.tolist() == [6, 0, 1, 0, 0, 1, 5, 3, 0, 0, 0, 0, 3]
        assert discrete.dtype == np.int64

    def test_to_discrete_rejects_integer_genome(self, params):
        """Conversion is only defined for real genomes."""
        species = Species(params, [0, 0, 1] * 4 + [5])
        with pytest.raises(UnsupportedOperation):
            species.to_discrete_genome()

    def test_random_species_is_valid(self, params):
        """Random genomes respect every bound."""
        rng = np.random.default_rng(42)
        for _ in range(20):
            species = random_species(params, rng)
            for p, gene in enumerate(species.genome):
                assert species.min_gene(p) <= gene <= species.max_gene(p)

    def test_random_real_species(self, params):
        """Random real genomes live in [0, 1)."""
        species = random_species(params, np.random.default_rng(1), real_valued=True)
        assert species.real_valued
        assert np.all((species.genome >= 0.0) & (species.genome < 1.0))

    def test_equality(self, params):
        """Species compare by parameters and genes."""
        a = Species(params, [0, 0, 1] * 4 + [5])
        b = Species(params, [0, 0, 1] * 4 + [5])
        c = Species(params, [0, 0, 1] * 4 + [4])
        assert a == b
        assert a != c
