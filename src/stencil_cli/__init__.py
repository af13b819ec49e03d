"""Stencil CLI - command-line front end for stencil_core."""
