"""Tests for the lookup and permutation argument gadgets."""
