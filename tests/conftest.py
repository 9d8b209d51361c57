"""Pytest configuration and fixtures.

Provides shared fixtures for Liberty and netlist content/files used across multiple tests.
"""

import tempfile
import textwrap
from pathlib import Path

import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner():
    """Typer CLI runner."""
    return CliRunner()


@pytest.fixture
def sample_liberty_content():
    """Provides a sample Liberty file content as a string.

    Contains:
    - Library header with `leakage_power_unit` 1nW and a default leakage of 0.5.
    - Cells, one per leakage resolution method:
        - INV: direct `cell_leakage_power` (2.0), plus a group that must be ignored.
        - NAND2: two conditional groups (3.0 and 5.0) -> average 4.0.
        - BUFX2: one unconditional group (6.0) -> no-when.
        - TIE: no leakage data -> library default 0.5.
    """
    return textwrap.dedent("""
    /* Sample library
       for hierarchy tests */
    library(test_lib) {
      delay_model : table_lookup;
      time_unit : "1ns";
      leakage_power_unit : "1nW";
      default_leakage_power : 0.5;
      capacitive_load_unit (1.0, pf);

      cell(INV) {
        area : 1.0;
        cell_leakage_power : 2.0;
        leakage_power() {
          when : "A";
          value : 99.0;
        }
        pin(A) {
          direction : input;
          capacitance : 0.002;
        }
        pin(Y) {
          direction : output;
          function : "!A";
        }
      }

      cell(NAND2) {
        area : 2.0;
        leakage_power() {
          when : "!A";
          value : 3.0;
        }
        leakage_power() {
          when : "A";
          value : 5.0;
        }
      }

      cell("BUFX2") {
        area : 1.5;
        leakage_power() {
          related_pg_pin : VDD;
          value : 6.0;
        }
      }

      cell(TIE) {
        area : 0.5;
      }
    }
    """)


@pytest.fixture
def sample_netlist_content():
    """Provides a sample structural netlist as a string.

    Hierarchy:
    - top: 3 x INV, 2 x buf2 (b0, b1), 1 x NAND2
    - buf2: 2 x INV, 1 x BUFX2
    """
    return textwrap.dedent("""
    // Generated netlist
    `timescale 1ns/1ps
    module buf2 (a, y);
      input a;
      output y;
      wire n1, n2;
      INV u0 (.A(a), .Y(n1));
      INV u1 (.A(n1), .Y(n2));
      BUFX2 u2 (.A(n2), .Y(y));
    endmodule

    module top (
      a, b,
      y
    );
      input a, b;
      output y;
      wire w0, w1, w2, w3, w4;
      (* keep *)
      INV i0 (.A(a), .Y(w0));
      INV i1 (.A(w0), .Y(w1));
      /* a block comment
         spanning lines; INV ghost (.A(a), .Y(w9)); */
      INV i2 (.A(w1),
              .Y(w2));
      buf2 b0 (.a(w2), .y(w3));
      buf2 b1 (.a(w3), .y(w4));
      NAND2 n0 (.A(w4), .B(b), .Y(y)); // output gate
    endmodule
    """)


@pytest.fixture
def sample_liberty_file(sample_liberty_content):
    """Creates a temporary .lib file populated with sample content.

    Yields:
        Path to the temporary file. Auto-deletes on cleanup.
    """
    with tempfile.NamedTemporaryFile(mode="w", suffix=".lib", delete=False) as f:
        f.write(sample_liberty_content)
        path = Path(f.name)
    yield path
    path.unlink()


@pytest.fixture
def sample_netlist_file(sample_netlist_content):
    """Creates a temporary .v file populated with sample content.

    Yields:
        Path to the temporary file. Auto-deletes on cleanup.
    """
    with tempfile.NamedTemporaryFile(mode="w", suffix=".v", delete=False) as f:
        f.write(sample_netlist_content)
        path = Path(f.name)
    yield path
    path.unlink()
