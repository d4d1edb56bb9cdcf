"""Localized Portuguese (pt-BR) message constants used across the engine.

Clinicians read these texts directly in API responses, so every user-facing
message lives here instead of inline in services or routers.
"""


class DomainErrorMessages:
    """Base domain error default messages."""

    DOMAIN_ERROR: str = "Erro de domínio"
    NOT_FOUND: str = "Recurso não encontrado"
    CONFIGURATION_ERROR: str = "Configuração do sistema inválida"


class ScoringErrorMessages:
    """Errors raised synchronously by the scoring orchestrator."""

    SCORING_ERROR: str = "Não foi possível calcular a pontuação"
    UNKNOWN_INSTRUMENT: str = "Instrumento '{code}' não cadastrado. Disponíveis: {available}"
    AGE_OUT_OF_RANGE: str = "Idade {age} fora da faixa do instrumento {code} ({min_age}-{max_age} anos)"
    MISSING_STRATIFIER: str = "O instrumento {code} exige o campo '{name}' ({values})"
    INVALID_AGE: str = "Idade deve ser um número inteiro não negativo"
    MISSING_FIELD: str = "Campo obrigatório ausente: {field}"
    NOT_NUMERIC: str = "Campo {field} deve ser numérico"
    NOT_FINITE: str = "Campo {field} deve ser um número finito"
    NEGATIVE_VALUE: str = "Campo {field} não pode ser negativo"
    NOT_INTEGER: str = "Campo {field} deve ser um número inteiro"
    ABOVE_MAXIMUM: str = "Campo {field} excede o máximo permitido ({maximum})"


class CatalogMessages:
    """Catalog loading and normative table integrity messages."""

    TABLE_INTEGRITY: str = "Tabela normativa inconsistente"
    MANIFEST_MISSING: str = "Manifesto do catálogo não encontrado: {path}"
    MANIFEST_INSTRUMENTS_REQUIRED: str = "O manifesto deve listar ao menos um instrumento"
    OBJECT_REQUIRED: str = "{context}: esperado um objeto YAML"
    NUMBER_REQUIRED: str = "{context}: valor numérico esperado, recebido {value!r}"
    FIELD_REQUIRED: str = "{context}: campo obrigatório '{field}'"
    DUPLICATE_INSTRUMENT: str = "Instrumento duplicado no catálogo: {code}"
    UNKNOWN_TABLE_FORM: str = "{context}: formato de tabela desconhecido; use um de {forms}"
    UNKNOWN_DIRECTION: str = "{context}: direção '{direction}' inválida"
    UNKNOWN_SCHEME: str = "{context}: esquema de classificação '{scheme}' inválido"
    COMPONENT_PATH_INVALID: str = "Caminho de componente inválido: {path}"
    COMPONENT_NOT_FOUND: str = "Componente não encontrado: {component}"
    COMPONENT_NOT_CALLABLE: str = "Componente não é invocável: {component}"
    EMPTY_BAND: str = "{context}: faixa etária sem intervalos de pontuação"
    INVERTED_AGE_BAND: str = "{context}: idade mínima maior que a máxima"
    BAND_OUTSIDE_INSTRUMENT: str = "{context}: faixa {min_age}-{max_age} fora da faixa do instrumento ({inst_min}-{inst_max})"
    OVERLAPPING_AGE_BANDS: str = "{context}: faixas etárias sobrepostas {first} e {second}"
    INVERTED_RANGE: str = "{context}: intervalo de pontuação vazio ou invertido {range}"
    OVERLAPPING_RANGES: str = "{context}: intervalos de pontuação sobrepostos {first} e {second}"
    NON_MONOTONIC: str = "{context}: valores normativos fora de ordem ({direction}) em {first} e {second}"
    NON_POSITIVE_SD: str = "{context}: desvio padrão deve ser positivo, recebido {sd}"
    CURVE_DIRECTION: str = "{context}: curva normal {curve} não segue a direção da tabela ({direction})"
    CURVE_WITH_RANGES: str = "{context}: faixa com curva normal não aceita intervalos explícitos"
    STRATIFIER_NOT_EXPECTED: str = "{context}: instrumento sem estratificação não aceita '{value}'"
    STRATIFIER_REQUIRED: str = "{context}: faixa sem valor de estratificação"
    STRATIFIER_UNKNOWN: str = "{context}: valor de estratificação '{value}' não declarado ({values})"
    MISSING_TABLE: str = "{code}: variável pontuada sem tabela normativa: {variable}"
    UNDECLARED_TABLE: str = "{code}: tabela para variável não declarada: {variable}"
    DERIVATION_CONTRACT: str = "{code}: derivação não produziu as variáveis {missing}"


__all__ = [
    "DomainErrorMessages",
    "ScoringErrorMessages",
    "CatalogMessages",
]
