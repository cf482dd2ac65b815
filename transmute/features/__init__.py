"""
Feature extractors: amplitude envelope, transient onsets, spectral peaks.
"""
from transmute.features.amplitude import envelope
from transmute.features.onsets import transients
from transmute.features.spectrum import peaks, harmonics, formants

__all__ = ["envelope", "transients", "peaks", "harmonics", "formants"]
