"""
Library functions used by the westmix units. The archive reader in `westmix.lib.mix` and the
codecs it depends on can be used independently of the units.
"""
