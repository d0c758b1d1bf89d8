"""Control tokens and fixed user-facing replies for the chat bot."""

COMMANDS = {
    "ACTIVATE": "/ativar",
    "DEACTIVATE": "/desativar",
    "HELP": "/ajuda",
}

MESSAGES = {
    "WELCOME": "Olá! Eu sou Loph. Sigo em processo de desenvolvimento",
    "GOODBYE": "Bot desativado. Até logo!",
    "PROCESSING": "Processando sua mensagem...",
    "ERROR": "Desculpe, ocorreu um erro ao processar sua mensagem.",
    "IMAGE_ERROR": "Desculpe, não foi possível processar a imagem agora.",
}


def build_help_text() -> str:
    return (
        "🤖 *Loph IA - Assistente de WhatsApp*\n"
        "\n"
        "*Comandos principais:*\n"
        f"{COMMANDS['ACTIVATE']} - Ativa a IA.\n"
        f"{COMMANDS['DEACTIVATE']} - Desativa a IA.\n"
        f"{COMMANDS['HELP']} - Mostra esta ajuda.\n"
        "\n"
        "A IA responde de forma natural, utilizando modelos de IA online e locais, "
        "realizando cálculos, gerando e lendo imagens, e muito mais."
    )
