"""Automatic confirmation of TGV Max Jeune travels."""
