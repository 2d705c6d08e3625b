import contextlib
import io
from pathlib import Path
import textwrap
import unittest

import main


SCRIPTS = Path(__file__).resolve().parent / "scripts"


def run_script_file(name: str, level: str = "first-steps") -> str:
    script_text = (SCRIPTS / name).read_text(encoding="utf-8")
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        main.run_script(script_text, default_level_name=level)
    return buf.getvalue().strip()


class HeadlessScriptOutputsTest(unittest.TestCase):
    def test_first_steps_matches_expected_output(self):
        output = run_script_file("first_steps.script")
        expected = textwrap.dedent(
            """
            failed void (1,3)
            outcome: fell_void at (1, 3) energized=False commands=2
            ¡Caíste al vacío! Intenta de nuevo.
            exhausted (2,4)
            outcome: running at (2, 4) energized=False commands=1
            Los comandos terminaron antes de llegar al portal. Sigue intentando.
               01234
             0 .....
             1 ...ED
             2 .....
             3 .V...
             4 @.@..
            energy (3,1) total=1
            victory (4,1)
            outcome: victory at (4, 1) energized=True commands=3
            ¡Nivel completado!
            Script complete
               01234
             0 .....
             1 ...E@
             2 .....
             3 .V...
             4 @....
            """
        ).strip()
        self.assertEqual(output, expected)

    def test_stairs_loops_matches_expected_output(self):
        output = run_script_file("stairs_loops.script")
        expected = textwrap.dedent(
            """
            Level 15 (stairs)
            invalid: Comando incorrecto: debe repetirse por lo menos 2 veces.
            invalid: Comando incorrecto: el patrón del bucle debe terminar exactamente en el portal.
            valid
            energy (4,8) total=1
            energy (4,8) total=2
            victory (10,0)
            outcome: victory at (10, 0) energized=True commands=3
            ¡Nivel completado!
            Script complete
               01234567890
             0 ..........@
             1 .........VV
             2 ........V..
             3 .......V...
             4 ......V....
             5 .....V.....
             6 ....V......
             7 ...V.......
             8 ..V.E......
             9 .V.........
            10 @..........
            """
        ).strip()
        self.assertEqual(output, expected)

    def test_snake_pit_matches_expected_output(self):
        output = run_script_file("snake_pit.script")
        expected = textwrap.dedent(
            """
            Level 6 (snake-pit)
            invalid: Comandos INCORRECTOS: separa cada instrucción con una coma (,).
            valid
            invalid: Comando incorrecto: los bucles no están disponibles en este nivel.
            moved (0,5)
            moved (1,5)
            failed snake (1,5)
            outcome: bitten_snake at (1, 5) energized=False commands=2
            ¡Te mordió una serpiente! Intenta de nuevo.
            energy (3,3) total=1
            victory (6,0)
            outcome: victory at (6, 0) energized=True commands=7
            ¡Nivel completado!
            rejected: Este nivel ya fue completado.
            Script complete
               0123456
             0 ......@
             1 .XXXX..
             2 .X..X..
             3 .X.EX..
             4 .X.....
             5 .XXXXX.
             6 @......
            """
        ).strip()
        self.assertEqual(output, expected)

    def test_unknown_script_command_raises(self):
        with contextlib.redirect_stdout(io.StringIO()):
            with self.assertRaises(ValueError):
                main.run_script("jump D1")


class HeadlessCommandLineTest(unittest.TestCase):
    def run_main(self, *argv):
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            code = main.main(list(argv))
        return code, buf.getvalue()

    def test_winning_commands_exit_zero(self):
        code, output = self.run_main("--headless", "--commands", "D3,S3,D1")
        self.assertEqual(code, 0)
        self.assertIn("outcome: victory", output)
        self.assertIn("victory (4,1)", output)

    def test_failed_commands_exit_one(self):
        code, output = self.run_main("--headless", "--commands", "I1")
        self.assertEqual(code, 1)
        self.assertIn("failed out_of_bounds (0,4)", output)

    def test_rejected_commands_exit_one(self):
        code, output = self.run_main("--headless", "--commands", "D3 S3")
        self.assertEqual(code, 1)
        self.assertIn("rejected:", output)

    def test_unknown_level_exits_two(self):
        with contextlib.redirect_stderr(io.StringIO()):
            code, _ = self.run_main("--headless", "--level", "nowhere")
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
