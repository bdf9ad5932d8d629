from django.core.exceptions import ValidationError


PROVINCIA_MIN = 1
PROVINCIA_MAX = 24


def es_cedula_valida(valor: str) -> bool:
    """
    Valida una cédula ecuatoriana de 10 dígitos.

    - Código de provincia (dos primeros dígitos) entre 01 y 24.
    - Tercer dígito entre 0 y 5 (persona natural).
    - Dígito verificador módulo 10: los dígitos en posición par se
      multiplican por 2 (restando 9 si el resultado pasa de 9) y se suman
      con los de posición impar; verificador = (10 - suma % 10) % 10.
    """
    if not valor or len(valor) != 10 or not valor.isdigit():
        return False

    provincia = int(valor[:2])
    if provincia < PROVINCIA_MIN or provincia > PROVINCIA_MAX:
        return False

    if int(valor[2]) > 5:
        return False

    suma = 0
    for posicion, caracter in enumerate(valor[:9]):
        digito = int(caracter)
        if posicion % 2 == 0:
            digito *= 2
            if digito > 9:
                digito -= 9
        suma += digito

    verificador = (10 - suma % 10) % 10
    return verificador == int(valor[9])


def es_ruc_valido(valor: str) -> bool:
    """
    RUC de 13 dígitos: los 10 primeros deben ser una cédula válida
    y el establecimiento (3 últimos) no puede ser "000".
    """
    if not valor or len(valor) != 13 or not valor.isdigit():
        return False
    return es_cedula_valida(valor[:10]) and valor[10:] != "000"


def validar_identificacion(valor):
    """
    Validador de campo para cédula o RUC. Vacío significa "sin identificación".
    """
    if valor is None:
        return
    valor = str(valor).strip()
    if not valor:
        return

    if len(valor) == 10 and es_cedula_valida(valor):
        return
    if len(valor) == 13 and es_ruc_valido(valor):
        return

    raise ValidationError(
        "Identificación inválida: se espera una cédula (10 dígitos) o RUC (13 dígitos) válido.",
        code="identificacion_invalida",
    )
