from ssvs.sampler.augment import draw_latent_response
from ssvs.sampler.chain import ChainState, init_chain_state, slice_rng
from ssvs.sampler.driver import resolve_burn_in, run_chain
from ssvs.sampler.spike_slab import gibbs_sweep, prepare_design

__all__ = [
    "ChainState",
    "draw_latent_response",
    "gibbs_sweep",
    "init_chain_state",
    "prepare_design",
    "resolve_burn_in",
    "run_chain",
    "slice_rng",
]
