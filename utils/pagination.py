"""
Helper para paginación consistente en toda la aplicación
"""
from flask import request


class Pagination:
    """Paginación base 1 con total conocido"""

    def __init__(self, page=1, per_page=20, total=0):
        self.page = max(1, page)
        self.per_page = max(1, min(per_page, 100))
        self.total = max(0, total)

    @property
    def offset(self):
        return (self.page - 1) * self.per_page

    @property
    def limit(self):
        return self.per_page

    @property
    def total_pages(self):
        return max(1, -(-self.total // self.per_page))

    @property
    def has_prev(self):
        return self.page > 1

    @property
    def has_next(self):
        return self.page < self.total_pages

    @property
    def prev_page(self):
        return self.page - 1 if self.has_prev else None

    @property
    def next_page(self):
        return self.page + 1 if self.has_next else None

    def iter_pages(self, vecinas=2):
        """
        Números de página para la UI: primera, última y las vecinas de la
        actual. None indica un salto ("...").
        """
        visibles = {1, self.total_pages}
        visibles.update(range(self.page - vecinas, self.page + vecinas + 1))

        anterior = 0
        for num in sorted(p for p in visibles if 1 <= p <= self.total_pages):
            if num != anterior + 1:
                yield None
            yield num
            anterior = num

    def to_dict(self):
        return {
            'page': self.page,
            'per_page': self.per_page,
            'total': self.total,
            'total_pages': self.total_pages,
            'has_prev': self.has_prev,
            'has_next': self.has_next,
        }


def get_pagination(per_page_default=20):
    """
    Obtiene la paginación desde request.args (page, per_page)

    El total se asigna después de contar:
        pagination = get_pagination()
        pagination.total = repo.contar(user_id)
    """
    try:
        page = int(request.args.get('page', 1))
    except (ValueError, TypeError):
        page = 1

    try:
        per_page = int(request.args.get('per_page', per_page_default))
    except (ValueError, TypeError):
        per_page = per_page_default

    return Pagination(page=page, per_page=per_page)
