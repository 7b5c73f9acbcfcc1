"""
Constructor de líneas de comando para procesos externos.
Los argumentos se mantienen como una lista ordenada de pares (flag, valor)
y se entregan como argv, sin pasar nunca por una shell.
"""
from typing import List, Optional, Tuple


class CommandBuilder:
    """Construye el argv de un binario externo."""

    def __init__(self, executable: str):
        if not executable:
            raise ValueError("executable requerido")
        self.executable = executable
        self._options: List[Tuple[str, Optional[str]]] = []
        self._positionals: List[str] = []

    def flag(self, name: str) -> "CommandBuilder":
        """Añade un flag sin valor (ej: --no-playlist)."""
        self._options.append((name, None))
        return self

    def option(self, name: str, value: str) -> "CommandBuilder":
        """Añade un flag con su valor como argumento separado (ej: -f <expr>)."""
        if value is None:
            raise ValueError(f"valor requerido para {name}")
        self._options.append((name, str(value)))
        return self

    def option_if(self, condition: bool, name: str, value: Optional[str] = None) -> "CommandBuilder":
        """Añade el flag (con o sin valor) solo si condition es verdadero."""
        if condition:
            if value is None:
                return self.flag(name)
            return self.option(name, value)
        return self

    def positional(self, value: str) -> "CommandBuilder":
        """Añade un argumento posicional; siempre va detrás de los flags."""
        self._positionals.append(str(value))
        return self

    def build(self) -> List[str]:
        command = [self.executable]
        for name, value in self._options:
            command.append(name)
            if value is not None:
                command.append(value)
        command.extend(self._positionals)
        return command

    @staticmethod
    def quote(command: List[str]) -> str:
        """Representación legible de un argv, solo para logs."""
        return " ".join(f'"{arg}"' if " " in arg else arg for arg in command)
