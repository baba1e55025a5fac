class MessagingError(Exception):
    """Error de dominio de mensajería, con un mensaje apto para mostrar al usuario"""
    code = "error"
    default_message = "Ocurrió un error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

class Unauthenticated(MessagingError):
    """No hay una identidad de llamante resoluble"""
    code = "unauthenticated"
    default_message = "Debes iniciar sesión para continuar"

class ValidationError(MessagingError):
    """Datos de entrada inválidos (cuerpo vacío, id faltante)"""
    code = "validation_error"
    default_message = "Datos inválidos"

class NotFoundError(MessagingError):
    """La contraparte o la notificación no existe"""
    code = "not_found"
    default_message = "No encontrado"

class StoreError(MessagingError):
    """Fallo de persistencia; nunca expone detalles internos"""
    code = "store_error"
    default_message = "La operación falló, inténtalo de nuevo"
