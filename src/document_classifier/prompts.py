"""Instructions sent to the providers."""

CLASSIFY_IMAGE_PROMPT = """Que tipo de documento é esse? (ex: CNH, RG, CPF, título de eleitor, certidão, comprovante de residência, contrato, etc.)

Extraia o máximo de informações do documento.

Regras:
- Responda SOMENTE com um objeto JSON, sem explicações
- O JSON deve conter obrigatoriamente a chave "tipo" com o tipo do documento
- Inclua os demais campos encontrados (ex: "nome", "numero", "data_nascimento", "validade")
- Use null para campos ilegíveis

Exemplo: {"tipo": "CNH", "nome": "Maria Silva", "numero": "01234567890"}"""

OCR_PROMPT = """Transcreva todo o texto visível nesta imagem.

Regras:
- Retorne APENAS o texto transcrito, sem explicações nem classificação
- Preserve a ordem de leitura e as quebras de linha
- Para trechos ilegíveis escreva [ilegível]"""

CLASSIFY_TEXT_PROMPT = """O texto abaixo foi extraído de um documento.

Identifique o tipo do documento (ex: CNH, RG, CPF, título de eleitor, certidão, comprovante de residência, contrato, etc.) e extraia o máximo de informações.

Regras:
- Responda SOMENTE com um objeto JSON, sem explicações
- O JSON deve conter obrigatoriamente a chave "tipo" com o tipo do documento
- Inclua os demais campos encontrados (ex: "nome", "numero", "data_nascimento", "validade")

Texto do documento:
{text}"""


def classify_text_prompt(text: str) -> str:
    """Embed document text in the text classification instruction."""
    return CLASSIFY_TEXT_PROMPT.replace("{text}", text)
